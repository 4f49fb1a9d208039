"""
Test de validación para config.py.

Verifica que:
- Configuración carga correctamente
- Funciones helper funcionan según especificación
- Manejo de errores es apropiado
"""

import sys
import os

# === RESOLUCIÓN DE PATH ===
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import config
from tests.helpers import run_test_functions


def test_get_migration_config():
    """Verifica que get_migration_config retorna estructura correcta para TODAS las migraciones."""
    print("\n=== TEST 1: get_migration_config ===")

    errors = []
    required_keys = [
        "collection",
        "migration_type",
        "fields",
        "default",
        "supports_bulk",
        "description",
    ]

    for migration_name in config.MIGRATIONS:
        cfg = config.get_migration_config(migration_name)

        for key in required_keys:
            if key not in cfg:
                errors.append(f"{migration_name}: Falta key '{key}'")

        if not isinstance(cfg.get("collection"), str):
            errors.append(f"{migration_name}: collection debe ser string")

        if not isinstance(cfg.get("fields"), list) or not cfg.get("fields"):
            errors.append(f"{migration_name}: fields debe ser lista no vacía")

        if cfg.get("migration_type") not in ["cleanup", "backfill"]:
            errors.append(
                f"{migration_name}: migration_type debe ser 'cleanup' o 'backfill'"
            )

        if cfg.get("migration_type") == "backfill" and cfg.get("default") is None:
            errors.append(f"{migration_name}: un backfill necesita default")

    if errors:
        for error in errors:
            print(f"   ❌ {error}")
        raise AssertionError(f"Errores en configuración: {errors}")

    print(f"✅ Las {len(config.MIGRATIONS)} migraciones tienen configuración válida")


def test_data_model_defaults():
    """Verifica los defaults contra los valores de dominio."""
    print("\n=== TEST 2: Defaults del modelo de datos ===")

    assert config.get_migration_config("users_access_level")["default"] == "user"
    assert config.get_migration_config("review_forms_quarter")["default"] == 1
    assert config.get_migration_config("sessions_expiration")["fields"] == [
        "expiresAt",
        "expiresAtLabel",
    ]
    assert "user" in config.ACCESS_LEVELS
    assert config.ROTATION_QUARTERS == [1, 2, 3, 4]
    assert config.BATCH_SIZE == 100
    print("   ✅ Defaults coherentes")


def test_get_collection_for_migration():
    """Verifica shortcut para obtener la colección de cada migración."""
    print("\n=== TEST 3: get_collection_for_migration ===")

    expected = {
        "sessions_expiration": "sessions",
        "users_access_level": "users",
        "review_forms_quarter": "reviewForms",
    }
    for migration_name, collection in expected.items():
        actual = config.get_collection_for_migration(migration_name)
        assert actual == collection, f"{migration_name}: esperado '{collection}', obtenido '{actual}'"
        print(f"   ✅ {migration_name} → {actual}")


def test_supports_bulk_mode():
    """Solo users_access_level ofrece el modo single-shot."""
    print("\n=== TEST 4: supports_bulk_mode ===")

    assert config.supports_bulk_mode("users_access_level") == True
    assert config.supports_bulk_mode("sessions_expiration") == False
    assert config.supports_bulk_mode("review_forms_quarter") == False
    print("   ✅ Solo users_access_level admite --bulk")


def test_error_handling():
    """Verifica que errores se manejan apropiadamente."""
    print("\n=== TEST 5: Error handling ===")

    try:
        config.get_migration_config("migracion_inexistente")
        assert False, "Debería lanzar KeyError"
    except KeyError as e:
        assert "migracion_inexistente" in str(e)
        assert "disponibles" in str(e).lower()
        print(f"✅ Error manejado correctamente")


def test_all_migrations_in_migration_order():
    """Verifica que todas las migraciones configuradas estén en MIGRATION_ORDER."""
    print("\n=== TEST 6: Completitud de MIGRATION_ORDER ===")

    configured = set(config.MIGRATIONS)
    ordered = set(config.MIGRATION_ORDER)

    missing = configured - ordered
    assert not missing, f"Agregar {missing} a MIGRATION_ORDER"

    extra = ordered - configured
    assert not extra, f"Configurar {extra} en MIGRATIONS o remover de MIGRATION_ORDER"

    assert len(config.MIGRATION_ORDER) == len(ordered), "MIGRATION_ORDER tiene duplicados"
    print(f"✅ Las {len(configured)} migraciones están en MIGRATION_ORDER")


def run_all_tests():
    return run_test_functions(
        "TESTS DE VALIDACIÓN: config.py",
        [
            test_get_migration_config,
            test_data_model_defaults,
            test_get_collection_for_migration,
            test_supports_bulk_mode,
            test_error_handling,
            test_all_migrations_in_migration_order,
        ],
    )


if __name__ == "__main__":
    sys.exit(0 if run_all_tests() else 1)
