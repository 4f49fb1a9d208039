"""
Migrador sessions_expiration: limpieza de campos deprecados en sessions.

Los campos expiresAt y expiresAtLabel ya no se usan para la expiración de
sesiones. Quedaron en el schema solo por compatibilidad con esta migración.

INVARIANTE DESPUÉS DE MIGRAR:
- Ninguna sesión tiene expiresAt ni expiresAtLabel (ni siquiera en null)

DECISIONES DE DISEÑO:
- Se eliminan con $unset: "limpiado" significa ausente, no cero ni null
- Sin guard_field: eliminar un campo ya ausente no modifica el documento
- Un campo presente en null también se elimina

Uso (desde jcepmigra.py):
    migrator = SessionsExpirationMigrator(collection='sessions')
    migrate_collection(storage, migrator)
"""

from .base import BaseMigrator
from storage import UNSET
import config


class SessionsExpirationMigrator(BaseMigrator):
    """
    Elimina expiresAt y expiresAtLabel de cada sesión que todavía los tenga.

    Attributes:
        collection (str): Colección de sesiones ('sessions')
        fields (list): Campos deprecados a eliminar
    """

    def __init__(self, collection="sessions"):
        super().__init__(collection)
        self.fields = list(config.get_migration_config("sessions_expiration")["fields"])

    def needs_migration(self, doc):
        # Presencia de la key, sin importar el valor
        return any(field in doc for field in self.fields)

    def build_patch(self, doc):
        return {field: UNSET for field in self.fields}
