"""Runtime configuration read from environment variables.

Values can also be provided through a ``.env`` file in the working directory,
which is loaded once on import.

Recognised variables:
- DB_URL: SQLAlchemy database URL (see ``collab_projects.data.db``)
- COLLAB_STORAGE_BACKEND: ``sql`` (default) or ``memory``
- COLLAB_MEMBERSHIP_POLICY: ``auto-enroll`` (default) or ``strict``
- COLLAB_MAX_FILE_SIZE: default per-project upload limit in bytes
- COLLAB_CORS_ORIGINS: comma separated list of allowed origins
- COLLAB_LOG_LEVEL: logging level name used by the server entry point
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from collab_projects.constants.project_constants import DEFAULT_MAX_FILE_SIZE, MembershipPolicy

load_dotenv()

STORAGE_BACKENDS = ("sql", "memory")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True, slots=True)
class Settings:
    """Application settings resolved from the environment."""

    storage_backend: str = "sql"
    membership_policy: MembershipPolicy = MembershipPolicy.AUTO_ENROLL
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def _parse_origins(raw: str | None) -> list[str]:
    if not raw:
        return ["*"]
    origins = [origin.strip() for origin in raw.split(",")]
    return [origin for origin in origins if origin] or ["*"]


def load_settings() -> Settings:
    """Build settings from the current environment.

    Raises:
        ValueError: If a variable holds an unsupported value.
    """
    backend = os.getenv("COLLAB_STORAGE_BACKEND", "sql").strip().lower()
    if backend not in STORAGE_BACKENDS:
        raise ValueError(f"Unsupported storage backend: {backend!r}")

    policy = os.getenv("COLLAB_MEMBERSHIP_POLICY", MembershipPolicy.AUTO_ENROLL).strip().lower()
    try:
        membership_policy = MembershipPolicy(policy)
    except ValueError as exc:
        raise ValueError(f"Unsupported membership policy: {policy!r}") from exc

    raw_size = os.getenv("COLLAB_MAX_FILE_SIZE")
    max_file_size = int(raw_size) if raw_size else DEFAULT_MAX_FILE_SIZE
    if max_file_size <= 0:
        raise ValueError("COLLAB_MAX_FILE_SIZE must be positive")

    return Settings(
        storage_backend=backend,
        membership_policy=membership_policy,
        max_file_size=max_file_size,
        cors_origins=_parse_origins(os.getenv("COLLAB_CORS_ORIGINS")),
        log_level=os.getenv("COLLAB_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str) -> None:
    """Configure root logging for the server process."""
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
