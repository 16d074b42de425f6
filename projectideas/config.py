"""
Runtime configuration read from environment variables.
"""

import logging
import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Settings for wiring the store, gateway and use cases.

    ``store`` picks the document store: ``memory`` keeps everything in the
    process, ``minio`` keeps one bucket per container on a MinIO server.
    ``shared_store`` declares that other processes write the same store,
    which needs atomic creates across processes.
    """

    store: Literal["memory", "minio"] = "memory"
    collection_prefix: str = "dev"
    items_per_page: int = Field(default=10)
    minio_endpoint: str = "localhost:9000"
    minio_access_key: str = "minioadmin"
    minio_secret_key: str = "minioadmin"
    minio_secure: bool = False
    shared_store: bool = False

    @field_validator("items_per_page")
    @classmethod
    def items_per_page_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Items per page must be positive")
        return v

    @field_validator("collection_prefix")
    @classmethod
    def collection_prefix_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Collection prefix cannot be empty")
        return v.strip()

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "Settings":
        """Build settings from ``environ`` (defaults to ``os.environ``).

        Raises:
            pydantic.ValidationError: If a variable has an invalid value
        """
        env = os.environ if environ is None else environ
        settings = cls(
            store=env.get("PROJECTIDEAS_STORE", "memory").lower(),
            collection_prefix=env.get(
                "PROJECTIDEAS_COLLECTION_PREFIX", "dev"
            ),
            items_per_page=env.get("PROJECTIDEAS_ITEMS_PER_PAGE", "10"),
            minio_endpoint=env.get("MINIO_ENDPOINT", "localhost:9000"),
            minio_access_key=env.get("MINIO_ACCESS_KEY", "minioadmin"),
            minio_secret_key=env.get("MINIO_SECRET_KEY", "minioadmin"),
            minio_secure=_flag(env.get("MINIO_SECURE", "false")),
            shared_store=_flag(env.get("PROJECTIDEAS_SHARED_STORE", "false")),
        )
        logger.debug(
            "Settings loaded",
            extra={
                "store": settings.store,
                "collection_prefix": settings.collection_prefix,
                "items_per_page": settings.items_per_page,
            },
        )
        return settings


def setup_logging(environ: Optional[Mapping[str, str]] = None) -> None:
    """Configure the root logger from ``LOG_LEVEL`` and ``LOG_FORMAT``.

    An unknown level falls back to INFO and is reported once logging is up.
    """
    env = os.environ if environ is None else environ
    log_level = env.get("LOG_LEVEL", "INFO").upper()
    numeric_level = logging.getLevelName(log_level)
    known = isinstance(numeric_level, int)

    logging.basicConfig(
        level=numeric_level if known else logging.INFO,
        format=env.get("LOG_FORMAT", DEFAULT_LOG_FORMAT),
        force=True,
    )
    if not known:
        logger.warning(
            "Unknown log level, using INFO", extra={"log_level": log_level}
        )
    logger.debug("Logging configured", extra={"log_level": log_level})
