"""
Script de análisis de documentos pendientes de migrar.

Para cada migración configurada recorre la colección y cuenta cuántos
documentos todavía cumplen el predicado del migrador.

Uso típico:
- Antes de migrar: dimensionar el trabajo
- Después de migrar: verificar completitud (pendientes debe ser 0)

Uso:
    python analyze_pending.py
    python analyze_pending.py users_access_level
"""

import sys

import config
from jcepmigra import connect_to_mongo, load_migrator
from storage import MongoStorage


def count_pending(storage, migrator, page_size=None):
    """
    Cuenta documentos totales y pendientes de una colección.

    Usa la misma paginación que la migración, así el análisis tampoco
    carga la colección completa en memoria.

    Args:
        storage: Implementación de BaseStorage
        migrator: Instancia de BaseMigrator
        page_size: Documentos por página (default: config.BATCH_SIZE)

    Returns:
        dict: {'total': int, 'pending': int}
    """
    if page_size is None:
        page_size = config.BATCH_SIZE
    stats = {"total": 0, "pending": 0}
    cursor = None

    while True:
        results = storage.paginate(migrator.collection, page_size, cursor)
        stats["total"] += len(results["page"])
        stats["pending"] += sum(
            1 for doc in results["page"] if migrator.needs_migration(doc)
        )
        if results["is_done"]:
            return stats
        cursor = results["continue_cursor"]


def print_report(migration_name, stats):
    """Imprime el resultado de una migración en formato de reporte."""
    total = stats["total"]
    pending = stats["pending"]
    coverage = ((total - pending) / total * 100) if total else 100.0

    status = "✅" if pending == 0 else "⏳"
    print(f"\n{status} {migration_name}")
    print(f"   └─ Documentos: {total:,}")
    print(f"   └─ Pendientes: {pending:,}")
    print(f"   └─ Migrados: {coverage:.1f}%")


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    migration_names = argv or config.MIGRATION_ORDER

    print("=" * 70)
    print("🔍 ANÁLISIS DE DOCUMENTOS PENDIENTES")
    print("=" * 70)

    client, db = connect_to_mongo()
    storage = MongoStorage(db)

    try:
        all_done = True
        for migration_name in migration_names:
            migrator = load_migrator(migration_name)
            stats = count_pending(storage, migrator)
            print_report(migration_name, stats)
            all_done = all_done and stats["pending"] == 0
    finally:
        client.close()

    print("\n" + "=" * 70)
    if all_done:
        print("✅ No quedan documentos pendientes")
    else:
        print("⏳ Hay documentos pendientes de migrar")
    print("=" * 70)

    return all_done


if __name__ == "__main__":
    sys.exit(0 if main() else 1)
