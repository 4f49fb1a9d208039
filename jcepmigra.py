r"""
Script principal de migraciones de datos del backend JCEP.

Arquitectura con carga dinámica de migradores:
- jcepmigra.py: Infraestructura genérica (conexión, paginación, progreso)
- migrators/*.py: Predicado + patch por colección (implementan BaseMigrator)
- storage.py: Acceso a la base (MongoStorage, MemoryStorage)
- config.py: Configuración centralizada de migraciones

Flujo de ejecución (BatchMode, paginado):
1. Usuario selecciona migración (menú interactivo o argumento)
2. Sistema carga dinámicamente el migrador correspondiente
3. Se pide una página de BATCH_SIZE documentos (cursor opaco)
4. Los patches de la página se despachan en paralelo y se esperan todos
5. Si quedan documentos, se continúa con el cursor de la página
6. Al terminar se reportan totales (actualizados / vistos)

Cada página es una unidad sin estado: lo único que pasa de una página a la
siguiente es el cursor. Si una página falla, la migración se corta ahí y se
imprime el cursor para reanudar; reanudar es seguro porque los migradores
son idempotentes.

BulkMode (single-shot): carga la colección completa en memoria y aplica todos
los patches en paralelo. Solo para migradores que lo ofrecen y colecciones
de hasta BULK_MAX_DOCUMENTS documentos.

Uso:
    python jcepmigra.py
    python jcepmigra.py users_access_level
    python jcepmigra.py users_access_level --bulk
    python jcepmigra.py review_forms_quarter --cursor=eyJhZnRlciI6IC4uLn0=
    python jcepmigra.py sessions_expiration --sample=samples/sessions_sample.json
"""

from pathlib import Path
import sys
import io
import importlib
from concurrent.futures import ThreadPoolExecutor
from pymongo import MongoClient
from pymongo.errors import ConnectionFailure

# Asegurar que el directorio raíz esté en sys.path para imports dinámicos
project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import config
from migrators.base import BaseMigrator
from storage import MongoStorage, MemoryStorage

USAGE = (
    "Uso: python jcepmigra.py [migración] [--cursor=CURSOR] [--bulk] [--sample=ARCHIVO]\n"
    "Ejemplo: python jcepmigra.py users_access_level --cursor=eyJhZnRlciI6..."
)


class BulkModeError(RuntimeError):
    """El modo bulk no está disponible para esta migración o colección."""


def connect_to_mongo():
    """
    Establece conexión a MongoDB usando credenciales de config.py.

    Returns:
        tuple: (client, database) de pymongo

    Raises:
        SystemExit: Si no puede conectar
    """
    try:
        print("🔌 Conectando a MongoDB...")
        client = MongoClient(config.MONGO_URI, serverSelectionTimeoutMS=5000)
        client.admin.command("ping")
        db = client[config.MONGO_DATABASE_NAME]
        print("✅ Conexión a MongoDB exitosa")
        return client, db
    except ConnectionFailure as e:
        print(f"❌ Error de conexión a MongoDB", file=sys.stderr)
        print(f"   Detalle: {e}", file=sys.stderr)
        sys.exit(1)


def load_migrator(migration_name):
    """
    Carga dinámicamente el migrador correspondiente a una migración.

    Convención de nombres:
        users_access_level → migrators.users_access_level → UsersAccessLevelMigrator
        sessions_expiration → migrators.sessions_expiration → SessionsExpirationMigrator

    Args:
        migration_name: Nombre de la migración (key de config.MIGRATIONS)

    Returns:
        BaseMigrator: Instancia del migrador específico

    Raises:
        SystemExit: Si no existe el módulo o la clase
    """
    class_name = (
        "".join(word.capitalize() for word in migration_name.split("_")) + "Migrator"
    )

    try:
        module = importlib.import_module(f"migrators.{migration_name}")
        migrator_class = getattr(module, class_name)

        # Verificar que hereda de BaseMigrator (type safety en runtime)
        if not issubclass(migrator_class, BaseMigrator):
            print(f"❌ {class_name} no hereda de BaseMigrator", file=sys.stderr)
            sys.exit(1)

        collection = config.get_collection_for_migration(migration_name)
        return migrator_class(collection=collection)

    except ModuleNotFoundError:
        print(f"❌ No existe migrador para '{migration_name}'", file=sys.stderr)
        print(f"   Se esperaba: migrators/{migration_name}.py", file=sys.stderr)
        sys.exit(1)
    except AttributeError:
        print(
            f"❌ El módulo migrators.{migration_name} no tiene la clase '{class_name}'",
            file=sys.stderr,
        )
        sys.exit(1)


def select_migration():
    """
    Muestra menú interactivo para seleccionar la migración a ejecutar.

    Returns:
        str: Nombre de la migración seleccionada

    Raises:
        SystemExit: Si no hay migraciones configuradas o usuario cancela
    """
    available = config.MIGRATION_ORDER

    if not available:
        print("❌ No hay migraciones configuradas en config.MIGRATION_ORDER")
        sys.exit(1)

    print("\n" + "=" * 70)
    print("📚 MIGRACIONES DISPONIBLES")
    print("=" * 70)

    for i, name in enumerate(available, 1):
        cfg = config.get_migration_config(name)
        print(f"\n{i}. {name}")
        print(f"   └─ {cfg.get('description', 'Sin descripción')}")
        print(f"   └─ Colección: {cfg['collection']} | Tipo: {cfg['migration_type']}")
        if cfg.get("supports_bulk"):
            print(f"   └─ Admite --bulk (hasta {config.BULK_MAX_DOCUMENTS:,} documentos)")

    print("\n" + "=" * 70)

    while True:
        try:
            choice = input(
                "Seleccione el número de migración a ejecutar (0 para salir): "
            ).strip()

            if choice == "0":
                print("\n👋 Migración cancelada por usuario")
                sys.exit(0)

            idx = int(choice) - 1

            if 0 <= idx < len(available):
                return available[idx]
            else:
                print("❌ Número fuera de rango. Intente nuevamente.")
        except ValueError:
            print("❌ Entrada inválida. Ingrese un número.")
        except (KeyboardInterrupt, EOFError):
            print("\n\n👋 Migración cancelada por usuario")
            sys.exit(0)


def dispatch_concurrently(func, items):
    """
    Ejecuta func sobre cada item en paralelo y espera a todos.

    Returns:
        list: Resultados en el mismo orden que items

    Raises:
        La primera excepción de func, una vez terminados todos los items
    """
    if not items:
        return []

    workers = min(config.MAX_PATCH_WORKERS, len(items))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(func, items))


def run_batch(storage, migrator, cursor=None, page_size=None):
    """
    Procesa una única página de la colección (unidad sin estado).

    Pasos:
    1. Leer la página que sigue a `cursor`
    2. Filtrar candidatos con el predicado (snapshot de la página)
    3. Despachar migrate_document() de todos los candidatos en paralelo
    4. Esperar a todos antes de retornar

    Args:
        storage: Implementación de BaseStorage
        migrator: Instancia de BaseMigrator
        cursor: Cursor opaco de la página anterior (None = primera página)
        page_size: Documentos por página (default: config.BATCH_SIZE)

    Returns:
        dict: {
            'processed': int,   # documentos vistos en la página
            'updated': int,     # documentos modificados
            'continue_cursor': str|None,
            'is_done': bool
        }
    """
    if page_size is None:
        page_size = config.BATCH_SIZE

    results = storage.paginate(migrator.collection, page_size, cursor)
    page = results["page"]

    candidates = [doc["_id"] for doc in page if migrator.needs_migration(doc)]
    outcomes = dispatch_concurrently(
        lambda doc_id: migrator.migrate_document(storage, doc_id), candidates
    )
    updated = sum(1 for changed in outcomes if changed)

    print(
        f"   📦 Página procesada: {len(page)} documentos de '{migrator.collection}', "
        f"actualizados: {updated}"
    )

    return {
        "processed": len(page),
        "updated": updated,
        "continue_cursor": results["continue_cursor"],
        "is_done": results["is_done"],
    }


def migrate_collection(storage, migrator, cursor=None, page_size=None):
    """
    Recorre la colección completa página a página (BatchMode).

    Las páginas se procesan estrictamente en orden de cursor: los patches de
    la página N terminan antes de pedir la página N+1. No hay reintentos:
    si una página falla se imprime el cursor desde el cual reanudar y el
    error se propaga.

    Args:
        storage: Implementación de BaseStorage
        migrator: Instancia de BaseMigrator
        cursor: Cursor desde el cual reanudar (None = desde el principio)
        page_size: Documentos por página (default: config.BATCH_SIZE)

    Returns:
        dict: {'pages': int, 'processed': int, 'updated': int, 'cursor': str|None}
    """
    if page_size is None:
        page_size = config.BATCH_SIZE

    print(f"\n🚚 Iniciando migración de colección '{migrator.collection}'...")
    print(f"   📦 Tamaño de página: {page_size}")
    print(f"   🏷️  Migrador: {type(migrator).__name__}")
    if cursor:
        print(f"   ⏩ Reanudando desde cursor: {cursor}")

    totals = {"pages": 0, "processed": 0, "updated": 0, "cursor": cursor}

    while True:
        try:
            result = run_batch(storage, migrator, cursor, page_size)
        except Exception as e:
            print(f"\n❌ Error en la página {totals['pages'] + 1}: {e}", file=sys.stderr)
            if cursor:
                print(f"   Para reanudar: --cursor={cursor}", file=sys.stderr)
            else:
                print("   Para reanudar: volver a ejecutar sin --cursor", file=sys.stderr)
            raise

        totals["pages"] += 1
        totals["processed"] += result["processed"]
        totals["updated"] += result["updated"]

        if result["is_done"]:
            break

        cursor = result["continue_cursor"]
        totals["cursor"] = cursor

    print(
        f"\n✅ Migración completada: {totals['updated']:,} actualizados "
        f"de {totals['processed']:,} documentos ({totals['pages']} páginas)"
    )
    return totals


def migrate_bulk(storage, migrator, max_documents=None):
    """
    Aplica la migración a toda la colección de una vez (BulkMode).

    ADVERTENCIA: Carga la colección completa en memoria. Solo se ofrece para
    colecciones chicas; para el resto usar migrate_collection().

    Args:
        storage: Implementación de BaseStorage
        migrator: Instancia de BaseMigrator con supports_bulk = True
        max_documents: Tope de documentos (default: config.BULK_MAX_DOCUMENTS)

    Returns:
        dict: {'success': True, 'updated': int, 'total': int}

    Raises:
        BulkModeError: Si el migrador no ofrece bulk o la colección excede el tope
    """
    if max_documents is None:
        max_documents = config.BULK_MAX_DOCUMENTS

    if not migrator.supports_bulk:
        raise BulkModeError(
            f"{type(migrator).__name__} no ofrece modo bulk, usar la migración paginada"
        )

    total = storage.count(migrator.collection)
    if total > max_documents:
        raise BulkModeError(
            f"'{migrator.collection}' tiene {total:,} documentos "
            f"(tope bulk: {max_documents:,}), usar la migración paginada"
        )

    print(f"\n🚚 Migración bulk de '{migrator.collection}' ({total:,} documentos)...")

    all_docs = storage.collect(migrator.collection)
    to_update = [doc for doc in all_docs if migrator.needs_migration(doc)]

    outcomes = dispatch_concurrently(
        lambda doc: storage.patch(
            migrator.collection,
            doc["_id"],
            migrator.build_patch(doc),
            only_if_missing=migrator.guard_field,
        ),
        to_update,
    )
    updated = sum(1 for changed in outcomes if changed)

    print(
        f"✅ Migración completada: {updated:,} actualizados "
        f"de {len(all_docs):,} documentos"
    )

    return {"success": True, "updated": updated, "total": len(all_docs)}


def parse_args(argv):
    """
    Interpreta los argumentos de línea de comandos.

    Returns:
        dict: {'migration': str|None, 'cursor': str|None, 'bulk': bool, 'sample': str|None}

    Raises:
        ValueError: Si hay una opción desconocida o más de una migración
    """
    options = {"migration": None, "cursor": None, "bulk": False, "sample": None}

    for arg in argv:
        if arg == "--bulk":
            options["bulk"] = True
        elif arg.startswith("--cursor="):
            options["cursor"] = arg.split("=", 1)[1] or None
        elif arg.startswith("--sample="):
            options["sample"] = arg.split("=", 1)[1]
        elif arg.startswith("--"):
            raise ValueError(f"Opción desconocida: {arg}")
        elif options["migration"] is None:
            options["migration"] = arg
        else:
            raise ValueError(f"Solo se admite una migración por ejecución ({arg})")

    if options["bulk"] and options["cursor"]:
        raise ValueError("--bulk no admite --cursor")

    return options


def main(argv=None):
    """
    Función principal que coordina una migración completa.

    Secuencia:
    1. Interpretar argumentos (o menú interactivo)
    2. Cargar migrador
    3. Conectar a MongoDB (o cargar sample con --sample)
    4. Ejecutar migración (paginada o bulk)
    5. Cerrar conexión

    Exit Codes:
        0: Éxito
        1: Error de argumentos, conexión o migración
    """
    argv = sys.argv[1:] if argv is None else argv

    try:
        options = parse_args(argv)
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        sys.exit(1)

    print("=" * 70)
    print("🚀 MIGRACIONES DE DATOS JCEP")
    print("=" * 70)
    print(f"📍 MongoDB: {config.MONGO_DATABASE_NAME}")

    migration_name = options["migration"] or select_migration()

    try:
        config.get_migration_config(migration_name)
    except KeyError as e:
        print(f"❌ {e.args[0]}", file=sys.stderr)
        sys.exit(1)

    print("\n" + "=" * 70)
    print(f"📦 Migración seleccionada: {migration_name}")
    print("=" * 70)

    migrator = load_migrator(migration_name)

    mongo_client = None
    if options["sample"]:
        print(f"🧪 Ensayo sobre sample: {options['sample']} (no se escribe en MongoDB)")
        storage = MemoryStorage.from_sample_file(options["sample"], migrator.collection)
    else:
        mongo_client, mongo_db = connect_to_mongo()
        storage = MongoStorage(mongo_db)

    try:
        if options["bulk"]:
            migrate_bulk(storage, migrator)
        else:
            migrate_collection(storage, migrator, cursor=options["cursor"])

        print("\n" + "=" * 70)
        print("✅ PROCESO COMPLETADO EXITOSAMENTE")
        print("=" * 70)

    except Exception as e:
        print(f"\n❌ Error durante la migración: {e}", file=sys.stderr)
        import traceback

        traceback.print_exc()
        sys.exit(1)

    finally:
        if mongo_client is not None:
            print("\n🔒 Cerrando conexión...")
            mongo_client.close()
            print("✅ Conexión cerrada correctamente")


if __name__ == "__main__":
    # Forzar UTF-8 en stdout/stderr para emojis en Windows
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8")
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding="utf-8")
    main()
