"""Infrastructure layer — database, stores, image storage.

This layer depends on stdlib, third-party libs (SQLAlchemy, Alembic),
and the domain layer's value snapshots and errors. It must never import
from services, commands, or output.
"""
