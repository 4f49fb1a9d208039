"""
Migradores de datos para las colecciones del backend JCEP.

Cada migrador implementa la interfaz BaseMigrator y se carga dinámicamente
en runtime según la migración seleccionada.

Estructura:
    base.py: Clases abstractas BaseMigrator y BackfillMigrator
    sessions_expiration.py: Limpieza de expiresAt/expiresAtLabel en sessions
    users_access_level.py: Backfill de accessLevel en users
    review_forms_quarter.py: Backfill de rotationQuarter en reviewForms

Los migradores son instanciados por load_migrator() en jcepmigra.py
usando importlib.import_module() para carga dinámica.

Tipos de migradores:
    - cleanup: Elimina campos deprecados (ej: sessions_expiration)
    - backfill: Completa un campo ausente con un default (ej: users_access_level)

Interfaz requerida (ver BaseMigrator):
    - needs_migration(doc)
    - build_patch(doc)
    - migrate_document(storage, doc_id)  (concreto en la base)
"""
