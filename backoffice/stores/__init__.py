"""Data stores for persistence and locking.

Stores handle:
- PostgreSQL: DB session, ORM operations
- Redis: short-lived locks around warranty code allocation

No business logic in stores - that belongs in services.
"""
