"""
Migrador users_access_level: backfill de accessLevel en users.

Usuarios creados antes de que existiera el control de acceso no tienen
accessLevel. El resto de la aplicación asume un valor explícito.

INVARIANTE DESPUÉS DE MIGRAR:
- Todo usuario tiene accessLevel ('user' o 'system_admin')

DECISIONES DE DISEÑO:
- Default 'user': nunca se otorga system_admin por migración
- Usuarios con nivel explícito no se modifican
- Único migrador con modo bulk: la colección de usuarios es chica

Uso (desde jcepmigra.py):
    migrator = UsersAccessLevelMigrator(collection='users')
    migrate_collection(storage, migrator)   # BatchMode (paginado)
    migrate_bulk(storage, migrator)         # BulkMode (single-shot)
"""

from .base import BackfillMigrator
import config


class UsersAccessLevelMigrator(BackfillMigrator):
    """
    Asigna accessLevel='user' a los usuarios que no tienen nivel explícito.

    Attributes:
        collection (str): Colección de usuarios ('users')
    """

    field = "accessLevel"
    supports_bulk = True

    def __init__(self, collection="users"):
        super().__init__(collection)
        self.default = config.get_migration_config("users_access_level")["default"]

        if self.default not in config.ACCESS_LEVELS:
            raise ValueError(f"accessLevel por defecto inválido: {self.default!r}")
