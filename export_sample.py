"""
export_sample.py - Exporta muestra de una colección MongoDB a JSON

El archivo generado sirve para ensayar una migración sin tocar la base:
    python jcepmigra.py users_access_level --sample=samples/users_sample.json

Uso:
    python export_sample.py <collection_name> [limit]

Ejemplo:
    python export_sample.py reviewForms 200
"""

import sys
from pathlib import Path
from bson.json_util import dumps
from pymongo import MongoClient
import config


def export_collection_sample(collection_name, limit=200, samples_dir="samples"):
    """
    Exporta muestra de una colección a JSON en formato Extended JSON.

    Args:
        collection_name: Nombre de la colección en MongoDB
        limit: Número de documentos a exportar
        samples_dir: Directorio destino

    Returns:
        Path|None: Archivo generado, o None si la colección está vacía
    """
    client = MongoClient(config.MONGO_URI)
    try:
        collection = client[config.MONGO_DATABASE_NAME][collection_name]

        print(f"📥 Obteniendo {limit} documentos de '{collection_name}'...")
        # Orden por _id: el mismo que recorren las migraciones
        docs = list(collection.find().sort("_id", 1).limit(limit))
    finally:
        client.close()

    if not docs:
        print(f"⚠️  La colección '{collection_name}' está vacía o no existe")
        return None

    samples_path = Path(samples_dir)
    samples_path.mkdir(exist_ok=True)

    # Serializar usando bson.json_util (mantiene tipos de MongoDB)
    json_output = dumps(docs, indent=2, ensure_ascii=False)

    filename = samples_path / f"{collection_name}_sample.json"
    with open(filename, 'w', encoding='utf-8') as f:
        f.write(json_output)

    print(f"✅ Exportados {len(docs)} documentos")
    print(f"📄 Archivo: {filename}")
    print(f"📊 Tamaño: {len(json_output) / 1024:.2f} KB")
    return filename


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Uso: python export_sample.py <collection_name> [limit]")
        print("Ejemplo: python export_sample.py reviewForms 200")
        sys.exit(1)

    collection_name = sys.argv[1]
    limit = int(sys.argv[2]) if len(sys.argv) > 2 else 200

    export_collection_sample(collection_name, limit)
