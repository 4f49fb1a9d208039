"""
Funciones helper compartidas para todos los tests.

Proporciona carga dinámica de migradores basándose en config.py y
constructores de datos de prueba sobre MemoryStorage.
"""

import sys
import os
import importlib

# Agregar directorio raíz al path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import config
from storage import MemoryStorage


def get_migrator_class_for_migration(migration_name):
    """
    Carga dinámicamente la clase migrador para una migración.

    Sigue la convención de nombres:
    - users_access_level → UsersAccessLevelMigrator (en migrators/users_access_level.py)

    Raises:
        ImportError: Si no existe el módulo
        AttributeError: Si no existe la clase
    """
    module = importlib.import_module(f"migrators.{migration_name}")
    class_name = (
        "".join(word.capitalize() for word in migration_name.split("_")) + "Migrator"
    )
    return getattr(module, class_name)


def get_all_migrator_classes():
    """
    Retorna lista de tuplas (nombre_clase, clase) para todas las migraciones
    de config.MIGRATION_ORDER.
    """
    migradores = []

    for migration_name in config.MIGRATION_ORDER:
        migrator_class = get_migrator_class_for_migration(migration_name)
        migradores.append((migrator_class.__name__, migrator_class))

    return migradores


def get_all_migrator_instances():
    """Retorna lista de tuplas (nombre_clase, instancia) con su colección."""
    instances = []

    for migration_name in config.MIGRATION_ORDER:
        migrator_class = get_migrator_class_for_migration(migration_name)
        collection = config.get_collection_for_migration(migration_name)
        instances.append((migrator_class.__name__, migrator_class(collection)))

    return instances


# === DATOS DE PRUEBA ===


def make_users(total, missing_every=25, missing_per_block=8):
    """
    Genera usuarios con ids ordenables ('user_0000', 'user_0001', ...).

    En cada bloque de `missing_every` usuarios, los primeros
    `missing_per_block` no tienen accessLevel. Con 250 usuarios y los
    valores por defecto quedan exactamente 80 sin accessLevel.
    """
    users = []
    for i in range(total):
        user = {"_id": f"user_{i:04d}", "type": "full", "name": f"Usuario {i}"}
        if i % missing_every >= missing_per_block:
            user["accessLevel"] = "system_admin" if i % 10 == 9 else "user"
        users.append(user)
    return users


def make_review_forms(total, with_quarter=0):
    """Genera formularios; los primeros `with_quarter` tienen rotationQuarter=3."""
    forms = []
    for i in range(total):
        form = {
            "_id": f"form_{i:04d}",
            "schemaVersion": 2,
            "rotationYear": 2025,
            "buddyResponsesVisibleToJC": False,
        }
        if i < with_quarter:
            form["rotationQuarter"] = 3
        forms.append(form)
    return forms


def make_sessions():
    """Sesiones con todas las combinaciones de campos deprecados."""
    return [
        {"_id": "s_1", "sessionId": "a", "createdAt": 1, "expiresAt": 1700000000000,
         "expiresAtLabel": "2023-11-14"},
        {"_id": "s_2", "sessionId": "b", "createdAt": 2, "expiresAtLabel": "2024-01-01"},
        {"_id": "s_3", "sessionId": "c", "createdAt": 3, "expiresAt": None},
        {"_id": "s_4", "sessionId": "d", "createdAt": 4, "authMethod": "google"},
    ]


class RecordingStorage(MemoryStorage):
    """
    MemoryStorage que registra cada operación, en orden de ocurrencia.

    events: [('paginate', n_docs), ('patch', doc_id), ...]
    """

    def __init__(self, collections=None):
        super().__init__(collections)
        self.events = []

    def paginate(self, collection, page_size, cursor=None):
        result = super().paginate(collection, page_size, cursor)
        self.events.append(("paginate", len(result["page"])))
        return result

    def patch(self, collection, doc_id, fields, only_if_missing=None):
        self.events.append(("patch", doc_id))
        return super().patch(collection, doc_id, fields, only_if_missing)

    def page_sizes(self):
        return [n for kind, n in self.events if kind == "paginate"]

    def patch_count(self):
        return sum(1 for kind, _ in self.events if kind == "patch")


class FailingStorage(MemoryStorage):
    """MemoryStorage cuyo patch falla para los ids indicados (simula timeout)."""

    def __init__(self, collections=None, fail_ids=()):
        super().__init__(collections)
        self.fail_ids = set(fail_ids)

    def patch(self, collection, doc_id, fields, only_if_missing=None):
        if doc_id in self.fail_ids:
            raise RuntimeError(f"Timeout simulado al escribir {doc_id}")
        return super().patch(collection, doc_id, fields, only_if_missing)


def run_test_functions(title, tests):
    """
    Ejecuta una lista de funciones de test e imprime resumen.

    Returns:
        bool: True si todas pasaron
    """
    print("=" * 70)
    print(f"🧪 {title}")
    print("=" * 70)

    failed = 0

    for test_func in tests:
        try:
            test_func()
        except AssertionError as e:
            print(f"\n❌ FALLO: {test_func.__name__}")
            print(f"   {e}")
            failed += 1
        except Exception as e:
            print(f"\n❌ ERROR: {test_func.__name__}")
            print(f"   {type(e).__name__}: {e}")
            failed += 1

    print("\n" + "=" * 70)

    if failed == 0:
        print("✅ TODOS LOS TESTS PASARON")
    else:
        print(f"❌ {failed} TEST(S) FALLARON")
    print("=" * 70)

    return failed == 0
