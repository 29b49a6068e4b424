"""Shared models, errors and utilities used by every Serini service."""
