from typing import Set

from drawit.errors import ConflictError, ValidationError


def normalize_name(name: str) -> str:
    """Uniqueness key for a name: trimmed and lower-cased."""
    return name.strip().lower()


def _is_usable(name) -> bool:
    return isinstance(name, str) and bool(name.strip())


class NameRegistry:
    """Case-insensitive set of names currently reserved by games, teams and players."""

    def __init__(self) -> None:
        self._names: Set[str] = set()

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name) -> bool:
        return self.contains(name)

    def contains(self, name) -> bool:
        if not _is_usable(name):
            return False
        return normalize_name(name) in self._names

    def register(self, name) -> str:
        if not _is_usable(name):
            raise ValidationError('Valid name is required')
        key = normalize_name(name)
        if key in self._names:
            raise ConflictError('Name must be unique')
        self._names.add(key)
        return key

    def unregister(self, name) -> None:
        if not _is_usable(name):
            return
        self._names.discard(normalize_name(name))

    def clear(self) -> None:
        self._names.clear()
