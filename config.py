"""
Configuración centralizada para las migraciones de datos del backend JCEP.

ARQUITECTURA:
Cada migración recorre una colección MongoDB página a página y aplica un
patch por documento cuando el predicado lo requiere:
- sessions_expiration: Elimina campos de expiración deprecados de sessions
- users_access_level: Completa accessLevel faltante con 'user'
- review_forms_quarter: Completa rotationQuarter faltante con 1 (Q1)

FLUJO DE MIGRACIÓN:
1. Elegir migración (menú interactivo o argumento de jcepmigra.py)
2. Recorrer la colección en páginas de BATCH_SIZE documentos
3. Reanudar con --cursor si una página falla (las migraciones son idempotentes)

USO DE LAS FUNCIONES HELPER:
    # Obtener configuración de una migración
    cfg = get_migration_config('users_access_level')
    collection = cfg['collection']  # 'users'

    # Verificar si ofrece modo bulk (single-shot)
    if supports_bulk_mode('users_access_level'):
        pass
"""

import os
from dotenv import load_dotenv

# Carga las variables del archivo .env en las variables de entorno del sistema
load_dotenv(override=True)

# --- Configuración de MongoDB ---
MONGO_URI = (
    f"mongodb://{os.getenv('MONGO_USER')}:{os.getenv('MONGO_PASSWORD')}"
    f"@{os.getenv('MONGO_HOST')}:{os.getenv('MONGO_PORT')}/"
    f"?authSource={os.getenv('MONGO_AUTH_SOURCE')}&readPreference=primary"
    f"&directConnection=true&ssl=false"
)
MONGO_DATABASE_NAME = os.getenv("MONGO_DATABASE") or "jcep"

# --- Configuración de Migración ---
BATCH_SIZE = 100  # Documentos por página (límite de tiempo por invocación)
BULK_MAX_DOCUMENTS = 1000  # Tope del modo bulk: colección entera en memoria
MAX_PATCH_WORKERS = 16  # Patches concurrentes dentro de una página

# --- Valores de dominio ---
ACCESS_LEVELS = ["user", "system_admin"]
ROTATION_QUARTERS = [1, 2, 3, 4]

# --- Configuración de Migraciones ---
# Cada migración define:
# - collection: Colección MongoDB que recorre
# - migration_type: 'cleanup' (elimina campos) o 'backfill' (completa default)
# - fields: Campos que toca
# - default: Valor asignado en backfill (None en cleanup)
# - supports_bulk: Si ofrece variante single-shot (solo colecciones chicas)
# - description: Descripción de negocio

MIGRATIONS = {
    "sessions_expiration": {
        "collection": "sessions",
        "migration_type": "cleanup",
        "fields": ["expiresAt", "expiresAtLabel"],
        "default": None,
        "supports_bulk": False,
        "description": "Elimina expiresAt/expiresAtLabel (deprecados) de las sesiones",
    },
    "users_access_level": {
        "collection": "users",
        "migration_type": "backfill",
        "fields": ["accessLevel"],
        "default": "user",
        "supports_bulk": True,
        "description": "Asigna accessLevel='user' a usuarios sin nivel explícito",
    },
    "review_forms_quarter": {
        "collection": "reviewForms",
        "migration_type": "backfill",
        "fields": ["rotationQuarter"],
        "default": 1,
        "supports_bulk": False,
        "description": "Asigna rotationQuarter=1 (Q1) a formularios sin trimestre",
    },
}

# --- Orden de Migración ---
# Las migraciones son independientes entre sí; este es el orden del menú.
MIGRATION_ORDER = [
    "sessions_expiration",
    "users_access_level",
    "review_forms_quarter",
]


# --- Funciones Helper ---


def get_migration_config(migration_name: str) -> dict:
    """
    Obtiene la configuración de una migración por nombre.

    Args:
        migration_name: Nombre de la migración (ej: 'users_access_level')

    Returns:
        dict: Configuración con keys collection, migration_type, fields,
              default, supports_bulk, description

    Raises:
        KeyError: Si la migración no está configurada

    Ejemplo:
        >>> get_migration_config('review_forms_quarter')['default']
        1
    """
    if migration_name not in MIGRATIONS:
        available = ", ".join(MIGRATIONS.keys())
        raise KeyError(
            f"Migración '{migration_name}' no está configurada.\n"
            f"Migraciones disponibles: {available}"
        )
    return MIGRATIONS[migration_name]


def get_collection_for_migration(migration_name: str) -> str:
    """
    Obtiene la colección MongoDB que recorre una migración.

    Ejemplo:
        >>> get_collection_for_migration('users_access_level')
        'users'
    """
    return get_migration_config(migration_name)["collection"]


def supports_bulk_mode(migration_name: str) -> bool:
    """
    Verifica si la migración ofrece la variante single-shot (BulkMode).

    El modo bulk carga la colección completa en memoria, por eso solo se
    ofrece donde la colección es chica y siempre con BULK_MAX_DOCUMENTS
    como tope.
    """
    return bool(get_migration_config(migration_name).get("supports_bulk"))
