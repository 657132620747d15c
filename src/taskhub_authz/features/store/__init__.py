"""Entity store contracts and adapters.

- entities/: EntityReader and EntityStore protocols
- repositories/: in-memory, PostgreSQL (asyncpg) and Redis-cached stores
- utils/: SQL queries and driver error translation
"""
