"""
Migrador review_forms_quarter: backfill de rotationQuarter en reviewForms.

Los formularios de review se crean ahora por trimestre de rotación (1-4).
Los formularios anteriores a ese cambio no tienen rotationQuarter.

INVARIANTE DESPUÉS DE MIGRAR:
- Todo formulario tiene rotationQuarter
- Los formularios existentes quedan en Q1

Uso (desde jcepmigra.py):
    migrator = ReviewFormsQuarterMigrator(collection='reviewForms')
    migrate_collection(storage, migrator)
"""

from .base import BackfillMigrator
import config


class ReviewFormsQuarterMigrator(BackfillMigrator):
    """Asigna rotationQuarter=1 a los formularios sin trimestre."""

    field = "rotationQuarter"

    def __init__(self, collection="reviewForms"):
        super().__init__(collection)
        self.default = config.get_migration_config("review_forms_quarter")["default"]

        if self.default not in config.ROTATION_QUARTERS:
            raise ValueError(f"rotationQuarter por defecto inválido: {self.default!r}")
