"""
Suite de tests para las migraciones de datos JCEP.

Los tests NO se conectan a MongoDB, solo validan:
- Sintaxis de código Python
- Configuración de migraciones
- Implementación correcta de la interfaz BaseMigrator
- Contrato de storage (paginación, cursor, patch condicionado)
- Propiedades de las migraciones sobre MemoryStorage (idempotencia,
  completitud, no interferencia, reanudación)
"""
