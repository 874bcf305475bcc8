"""Import session state: sheet collection, events and mutation dispatch."""

from .collection import SheetCollection
from .dispatcher import MutationDispatcher
from .session import ImportSession

__all__ = [
    "ImportSession",
    "MutationDispatcher",
    "SheetCollection",
]
