"""Ports — protocols the engine requires from its storage backend."""

from __future__ import annotations

from .backend import (
    IBackendAdapter,
    IInsertQuery,
    ISelectQuery,
    ITableHandle,
    IUpdateQuery,
    Row,
)

__all__ = [
    "IBackendAdapter",
    "IInsertQuery",
    "ISelectQuery",
    "ITableHandle",
    "IUpdateQuery",
    "Row",
]
