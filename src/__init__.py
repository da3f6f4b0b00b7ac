"""Scatterbrain: adaptive personalization for captured thoughts.

Mines a user's entries into an interest profile, selects an analysis tier
from usage volume, and keeps generated insights in a local indexed store.
"""

__version__ = "0.4.0"
