# src/messenger/db/__init__.py
"""Database configuration and utilities."""

from .session import Base, build_engine, create_tables, drop_tables
from .store import Store

__all__ = ["Base", "Store", "build_engine", "create_tables", "drop_tables"]
