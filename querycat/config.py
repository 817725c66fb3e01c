from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_MONGO_URI = "mongodb://localhost:27017"
DEFAULT_DATABASE = "plp_bookstore"
DEFAULT_COLLECTION = "books"


@dataclass
class StoreConfig:
    uri: str = DEFAULT_MONGO_URI
    database: str = DEFAULT_DATABASE
    collection: str = DEFAULT_COLLECTION
    server_selection_timeout_ms: int = 5_000

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not self.uri:
            raise ValueError("uri must be a non-empty connection string")
        if not self.database:
            raise ValueError("database must be a non-empty name")
        if not self.collection:
            raise ValueError("collection must be a non-empty name")
        if self.server_selection_timeout_ms <= 0:
            raise ValueError(
                "server_selection_timeout_ms must be > 0; the driver would otherwise fail instantly"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "StoreConfig":
        env = os.environ if environ is None else environ
        return cls(
            uri=env.get("QUERYCAT_MONGO_URI", DEFAULT_MONGO_URI),
            database=env.get("QUERYCAT_DATABASE", DEFAULT_DATABASE),
            collection=env.get("QUERYCAT_COLLECTION", DEFAULT_COLLECTION),
            server_selection_timeout_ms=int(
                env.get("QUERYCAT_SERVER_SELECTION_TIMEOUT_MS", "5000")
            ),
        )


@dataclass
class RunnerConfig:
    # overall wall-clock budget for one run; None disables the deadline
    deadline_s: float | None = None

    def __post_init__(self) -> None:
        if self.deadline_s is not None and self.deadline_s <= 0:
            raise ValueError("deadline_s must be > 0 or None")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "RunnerConfig":
        env = os.environ if environ is None else environ
        raw = env.get("QUERYCAT_DEADLINE_S")
        return cls(deadline_s=float(raw) if raw else None)
