"""Hooks for external collaborators - production defaults, tests override.

Production code calls these directly; tests replace them with fakes and an
autouse fixture restores the originals.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Protocol

from .persistence.protocols import ConnectionProtocol


def _default_get_env(key: str) -> str | None:
    """Production implementation - reads from os.environ."""
    return os.getenv(key)


class PsycopgModuleProtocol(Protocol):
    def connect(self, conninfo: str, autocommit: bool = False) -> ConnectionProtocol: ...


class ConnectionFactoryProtocol(Protocol):
    def __call__(self, dsn: str) -> ConnectionProtocol: ...


class ServeProtocol(Protocol):
    def __call__(self, app: str, *, host: str, port: int, log_config: None) -> None: ...


def _psycopg_connect_autocommit(dsn: str) -> ConnectionProtocol:
    """Connect to postgres with autocommit enabled.

    Each INSERT commits on its own, so an upload is either fully stored or
    not stored at all.
    """
    module: PsycopgModuleProtocol = __import__("psycopg")
    conn: ConnectionProtocol = module.connect(dsn, autocommit=True)
    return conn


def _uvicorn_run(app: str, *, host: str, port: int, log_config: None) -> None:
    uvicorn = __import__("uvicorn")
    run: ServeProtocol = uvicorn.run
    run(app, host=host, port=port, log_config=log_config)


# Environment access used by settings loading.
get_env: Callable[[str], str | None] = _default_get_env

# Opens the datastore connection for the poll variant.
connection_factory: ConnectionFactoryProtocol = _psycopg_connect_autocommit

# Starts the ASGI server from ``python -m qr_relay``.
serve: ServeProtocol = _uvicorn_run

__all__ = ["connection_factory", "get_env", "serve"]
