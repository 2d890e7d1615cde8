"""Game domain services: the game directory and name bookkeeping.

This package contains pure domain logic that is imported by HTTP routes
and socket handlers, keeping transport concerns separated from the game
model.
"""

from .directory import GameDirectory
from .registry import NameRegistry, normalize_name
from .validation import NameValidator, validate_name

__all__ = ['GameDirectory', 'NameRegistry', 'NameValidator', 'normalize_name', 'validate_name']
