"""
Módulo base para migraciones de colecciones del backend JCEP.

Define la interfaz común (contrato) que todos los migradores específicos
deben implementar. Esto permite que jcepmigra.py recorra cualquier colección
sin conocer qué campo se limpia o se completa.

Patrón de diseño: Strategy Pattern
- jcepmigra.py = Contexto (driver: paginación, concurrencia, progreso)
- BaseMigrator = Estrategia abstracta (predicado + patch)
- SessionsExpirationMigrator, UsersAccessLevelMigrator, ... = Estrategias concretas

Flujo de uso:
1. jcepmigra.py carga dinámicamente un migrador
2. Pide una página de la colección al storage
3. Filtra la página con needs_migration() (snapshot)
4. Llama a migrate_document() por cada candidato, en paralelo
5. migrate_document() vuelve a leer el documento y re-evalúa el predicado
   antes de escribir (idempotencia: correr dos veces es un no-op)

Ejemplo de implementación:
    class MiMigrador(BaseMigrator):
        def needs_migration(self, doc):
            return 'campoViejo' in doc

        def build_patch(self, doc):
            return {'campoViejo': UNSET}
"""

from abc import ABC, abstractmethod

from storage import is_missing


class BaseMigrator(ABC):
    """
    Clase abstracta que define la interfaz para migradores de colecciones.

    Attributes:
        collection (str): Colección MongoDB que recorre la migración
        guard_field (str|None): Campo que debe seguir ausente al escribir.
            None cuando el patch es idempotente por sí mismo (ej: $unset).
        supports_bulk (bool): Si ofrece la variante single-shot
    """

    guard_field = None
    supports_bulk = False

    def __init__(self, collection: str):
        """
        Args:
            collection: Nombre de la colección (ej: 'users')
        """
        self.collection = collection

    @abstractmethod
    def needs_migration(self, doc: dict) -> bool:
        """
        Predicado: decide si el documento necesita el patch.

        Debe ser False para documentos ya migrados, así una segunda corrida
        completa no modifica nada.
        """
        pass

    @abstractmethod
    def build_patch(self, doc: dict) -> dict:
        """
        Construye el patch parcial para un documento.

        Returns:
            dict: {campo: valor}; storage.UNSET elimina el campo
        """
        pass

    def migrate_document(self, storage, doc_id) -> bool:
        """
        Fetch-check-patch de un documento.

        No confía en el snapshot de la página: vuelve a leer el documento.
        - Documento eliminado desde que se leyó la página → se saltea
        - Documento ya migrado por otro camino → se saltea
        - Error del storage → se propaga (aborta la página)

        Args:
            storage: Implementación de BaseStorage
            doc_id: _id del documento

        Returns:
            bool: True si el documento fue modificado
        """
        doc = storage.get(self.collection, doc_id)
        if doc is None:
            return False

        if not self.needs_migration(doc):
            return False

        return storage.patch(
            self.collection,
            doc_id,
            self.build_patch(doc),
            only_if_missing=self.guard_field,
        )


class BackfillMigrator(BaseMigrator):
    """
    Migrador que completa un campo ausente con un valor por defecto.

    Los documentos que ya tienen un valor explícito nunca se tocan, y el
    patch se condiciona a que el campo siga ausente al escribir.

    Attributes:
        field (str): Campo a completar
        default: Valor asignado cuando el campo falta
    """

    field = None
    default = None

    @property
    def guard_field(self):
        return self.field

    def needs_migration(self, doc):
        return is_missing(doc, self.field)

    def build_patch(self, doc):
        return {self.field: self.default}
