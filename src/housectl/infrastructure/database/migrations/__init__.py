"""Alembic migration infrastructure for housectl.

Provides programmatic Alembic configuration — no alembic.ini needed.
The migration scripts live alongside this module.
"""

from __future__ import annotations

from pathlib import Path

from alembic.config import Config

from housectl.infrastructure.database.engine import db_path_for


def build_config(db_url: str) -> Config:
    """Build an Alembic Config pointing at our migration scripts."""
    cfg = Config()
    cfg.set_main_option("script_location", str(Path(__file__).parent))
    cfg.set_main_option("sqlalchemy.url", db_url)
    return cfg


def db_url_for(root: Path) -> str:
    return f"sqlite:///{db_path_for(root)}"


def stamp_head(root: Path) -> None:
    """Stamp a database as at the current head revision.

    Fresh databases are created from :data:`schema.metadata`, so they
    start at head without running any migration.
    """
    from alembic import command

    command.stamp(build_config(db_url_for(root)), "head")
