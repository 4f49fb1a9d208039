"""
Acceso a la base de documentos para las migraciones.

Las migraciones no conocen MongoDB directamente: reciben un storage
(inyección explícita) que expone tres operaciones con contrato fijo:

    paginate(collection, page_size, cursor) → {'page', 'continue_cursor', 'is_done'}
    get(collection, doc_id)                 → dict | None
    patch(collection, doc_id, fields)       → bool (atómico por documento)

Implementaciones:
- MongoStorage: pymongo, paginación keyset sobre _id ascendente
- MemoryStorage: en proceso, para tests y ensayos sobre samples exportados

El cursor es opaco para quien lo recibe: es el último _id de la página
serializado con bson.json_util y codificado en base64url, así puede pasarse
por línea de comandos para reanudar (python jcepmigra.py ... --cursor=XXX).
"""

import base64
import threading
from abc import ABC, abstractmethod

from bson import json_util
from pymongo import ASCENDING


class _Unset:
    """Marca un campo a eliminar del documento ($unset)."""

    def __repr__(self):
        return "UNSET"


UNSET = _Unset()


class InvalidCursorError(ValueError):
    """El cursor recibido no fue generado por encode_cursor()."""


def encode_cursor(last_id) -> str:
    """
    Codifica la posición de paginación (último _id visto) como string opaco.

    Args:
        last_id: _id del último documento de la página (ObjectId, str, int)

    Returns:
        str: Cursor base64url apto para línea de comandos
    """
    raw = json_util.dumps({"after": last_id})
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str):
    """
    Decodifica un cursor generado por encode_cursor().

    Returns:
        El _id a partir del cual continuar (exclusivo)

    Raises:
        InvalidCursorError: Si el cursor está mal formado
    """
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("ascii"))
        return json_util.loads(raw.decode("utf-8"))["after"]
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise InvalidCursorError(f"Cursor inválido: {cursor!r}") from e


def is_missing(doc: dict, field: str) -> bool:
    """Un campo ausente o en null cuenta como no definido."""
    return doc.get(field) is None


class BaseStorage(ABC):
    """
    Contrato del colaborador de base de datos usado por las migraciones.

    Todas las escrituras pasan por patch(), que es atómico por documento.
    Ninguna migración toma locks que abarquen más de un documento.
    """

    @abstractmethod
    def paginate(self, collection: str, page_size: int, cursor=None) -> dict:
        """
        Lee una página acotada de la colección.

        Args:
            collection: Nombre de la colección
            page_size: Máximo de documentos en la página (>= 1)
            cursor: Cursor opaco de la página anterior, None en la primera

        Returns:
            dict: {
                'page': [doc, ...],
                'continue_cursor': str|None,
                'is_done': bool
            }
        """
        pass

    @abstractmethod
    def get(self, collection: str, doc_id):
        """Retorna el documento o None si ya no existe."""
        pass

    @abstractmethod
    def patch(self, collection: str, doc_id, fields: dict, only_if_missing=None) -> bool:
        """
        Aplica un patch parcial a un documento.

        Args:
            collection: Nombre de la colección
            doc_id: _id del documento
            fields: {campo: valor}; UNSET elimina el campo
            only_if_missing: Campo que debe seguir ausente al momento de
                escribir (el patch no se aplica si otro proceso ya lo completó)

        Returns:
            bool: True si el documento fue modificado
        """
        pass

    def collect(self, collection: str, page_size: int = 500) -> list:
        """Carga la colección completa en memoria recorriendo paginate()."""
        docs = []
        cursor = None
        while True:
            result = self.paginate(collection, page_size, cursor)
            docs.extend(result["page"])
            if result["is_done"]:
                return docs
            cursor = result["continue_cursor"]

    def count(self, collection: str) -> int:
        return len(self.collect(collection))

    @staticmethod
    def _check_page_size(page_size):
        if page_size < 1:
            raise ValueError(f"page_size debe ser >= 1 (recibido: {page_size})")


def _build_update(fields: dict) -> dict:
    """Traduce un patch a operadores MongoDB ($set / $unset)."""
    to_set = {k: v for k, v in fields.items() if v is not UNSET}
    to_unset = {k: "" for k, v in fields.items() if v is UNSET}

    update = {}
    if to_set:
        update["$set"] = to_set
    if to_unset:
        update["$unset"] = to_unset
    return update


class MongoStorage(BaseStorage):
    """
    Storage sobre una base pymongo.

    Paginación keyset: cada página pide page_size + 1 documentos con
    _id > último _id visto, ordenados ascendente. El documento extra solo
    sirve para saber si quedan más (is_done).
    """

    def __init__(self, db):
        """
        Args:
            db: Base de datos de pymongo (client[MONGO_DATABASE_NAME])
        """
        self.db = db

    def paginate(self, collection, page_size, cursor=None):
        self._check_page_size(page_size)

        query = {}
        if cursor is not None:
            query = {"_id": {"$gt": decode_cursor(cursor)}}

        docs = list(
            self.db[collection]
            .find(query)
            .sort("_id", ASCENDING)
            .limit(page_size + 1)
        )
        page = docs[:page_size]

        return {
            "page": page,
            "continue_cursor": encode_cursor(page[-1]["_id"]) if page else cursor,
            "is_done": len(docs) <= page_size,
        }

    def get(self, collection, doc_id):
        return self.db[collection].find_one({"_id": doc_id})

    def patch(self, collection, doc_id, fields, only_if_missing=None):
        update = _build_update(fields)
        if not update:
            return False

        query = {"_id": doc_id}
        if only_if_missing:
            # {campo: None} matchea tanto null como ausente
            query[only_if_missing] = None

        result = self.db[collection].update_one(query, update)
        return result.modified_count == 1

    def count(self, collection):
        return self.db[collection].count_documents({})


class MemoryStorage(BaseStorage):
    """
    Storage en memoria con el mismo contrato que MongoStorage.

    Los documentos se recorren por _id ascendente. Se usa en los tests y
    para ensayar una migración sobre un sample exportado con export_sample.py.
    """

    def __init__(self, collections=None):
        """
        Args:
            collections: {nombre: [doc, ...]} (cada doc con '_id')
        """
        self.collections = {}
        self._lock = threading.Lock()
        for name, docs in (collections or {}).items():
            for doc in docs:
                self.insert(name, doc)

    @classmethod
    def from_sample_file(cls, path, collection):
        """
        Crea un storage a partir de un sample en Extended JSON.

        Args:
            path: Archivo generado por export_sample.py
            collection: Nombre de colección bajo el que cargar los documentos
        """
        with open(path, "r", encoding="utf-8") as f:
            docs = json_util.loads(f.read())
        return cls({collection: docs})

    def insert(self, collection, doc):
        """Inserta una copia del documento (solo para preparar datos)."""
        self.collections.setdefault(collection, {})[doc["_id"]] = dict(doc)
        return doc["_id"]

    def paginate(self, collection, page_size, cursor=None):
        self._check_page_size(page_size)

        docs = self.collections.get(collection, {})
        ids = sorted(docs)
        if cursor is not None:
            after = decode_cursor(cursor)
            try:
                ids = [doc_id for doc_id in ids if doc_id > after]
            except TypeError as e:
                # Cursor de otra colección (tipo de _id distinto)
                raise InvalidCursorError(
                    f"Cursor no corresponde a '{collection}': {cursor!r}"
                ) from e

        page = [dict(docs[doc_id]) for doc_id in ids[:page_size]]

        return {
            "page": page,
            "continue_cursor": encode_cursor(page[-1]["_id"]) if page else cursor,
            "is_done": len(ids) <= page_size,
        }

    def get(self, collection, doc_id):
        doc = self.collections.get(collection, {}).get(doc_id)
        return dict(doc) if doc is not None else None

    def patch(self, collection, doc_id, fields, only_if_missing=None):
        with self._lock:
            doc = self.collections.get(collection, {}).get(doc_id)
            if doc is None:
                return False
            if only_if_missing and not is_missing(doc, only_if_missing):
                return False

            modified = False
            for field, value in fields.items():
                if value is UNSET:
                    if field in doc:
                        del doc[field]
                        modified = True
                elif field not in doc or doc[field] != value:
                    doc[field] = value
                    modified = True
            return modified

    def count(self, collection):
        return len(self.collections.get(collection, {}))
