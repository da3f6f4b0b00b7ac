"""Entries: raw captured thoughts and the source they are read from."""

from scatterbrain.entries.models import Entry
from scatterbrain.entries.source import ENTRIES_FILENAME, EntrySource, JsonEntrySource

__all__ = [
    "ENTRIES_FILENAME",
    "Entry",
    "EntrySource",
    "JsonEntrySource",
]
