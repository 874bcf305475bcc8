"""Persistence API client used by the upload sequencer."""

from .client import HttpPersistenceClient, PersistenceClient, PersistenceError

__all__ = [
    "HttpPersistenceClient",
    "PersistenceClient",
    "PersistenceError",
]
