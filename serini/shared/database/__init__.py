"""Read-only PostgreSQL access for the pgvector knowledge corpus."""

from .connection import DatabaseConfig, ConnectionManager

__all__ = ["DatabaseConfig", "ConnectionManager"]
