"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, housectl.toml only contains
overrides. A fresh data root needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from housectl.domain.types import MAX_ROLE, MIN_ROLE

# --- housectl.toml sections ---


class MembershipConfig(BaseModel):
    """[membership] section.

    ``remove_min_role`` is the lowest-privilege role number still allowed
    to remove other members. The default (9) lets any active member
    remove anyone.
    """

    model_config = {"frozen": True}

    remove_min_role: int = Field(default=MAX_ROLE, ge=MIN_ROLE, le=MAX_ROLE)
    allow_self_removal: bool = True


class StorageConfig(BaseModel):
    """[storage] section."""

    model_config = {"frozen": True}

    max_image_kb: int = Field(default=1024, gt=0)
    allowed_image_types: list[str] = Field(default_factory=lambda: ["jpeg", "png"])


class NotifyConfig(BaseModel):
    """[notify] section."""

    model_config = {"frozen": True}

    enabled: bool = False
    smtp_host: str = "localhost"
    smtp_port: int = 25
    sender: str = "no-reply@housectl.local"
    use_tls: bool = False
    username: str | None = None
    password: str | None = None
    timeout: float = 10.0


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    busy_timeout: float = Field(default=30.0, gt=0)


class HouseConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    membership: MembershipConfig = Field(default_factory=MembershipConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    notify: NotifyConfig = Field(default_factory=NotifyConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
