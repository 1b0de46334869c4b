"""Bipartite Unique Identifiers: shard-aware, time-sortable 128-bit IDs."""

from .codec import FormatError
from .identifier import ID, Key, Shard
from .layout import EPOCH
from .process import Process

__all__ = [
    "EPOCH",
    "ID",
    "FormatError",
    "Key",
    "Process",
    "Shard",
]
