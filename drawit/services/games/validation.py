"""Well-formedness rules for game, team and player names.

Uniqueness is handled by :class:`NameRegistry`; this module only answers
whether a name is acceptable to show to other players.
"""

import re
from typing import Any, Dict, Iterable, Optional

DEFAULT_RESERVED_WORDS = frozenset({
    'admin', 'system', 'game', 'player', 'team', 'user',
    'guest', 'anonymous', 'null', 'undefined', 'test',
})

_ALLOWED = re.compile(r'^[a-zA-Z0-9\s\-_]+$')
_CONSECUTIVE_SPECIAL = re.compile(r'[\s\-_]{2,}')
_EDGE_SPECIAL = re.compile(r'^[\s\-_]|[\s\-_]$')
_DISALLOWED = re.compile(r'[^a-zA-Z0-9\s\-_]')


class NameValidator:
    def __init__(self, min_length: int = 2, max_length: int = 50,
                 reserved_words: Optional[Iterable[str]] = None) -> None:
        self.min_length = min_length
        self.max_length = max_length
        self.reserved_words = set(reserved_words if reserved_words is not None else DEFAULT_RESERVED_WORDS)

    def validate(self, name: Any, entity_type: str = 'entity') -> Dict[str, Any]:
        """Check ``name`` and return ``{isValid, message, normalizedName, originalName}``.

        Rules are applied in order and the first failure wins.
        """
        result = {'isValid': False, 'message': '', 'normalizedName': '', 'originalName': ''}

        if not name:
            result['message'] = f'{entity_type} name is required'
            return result
        if not isinstance(name, str):
            result['message'] = f'{entity_type} name must be a string'
            return result

        trimmed = name.strip()
        normalized = trimmed.lower()

        if len(trimmed) < self.min_length:
            result['message'] = f'{entity_type} name must be at least {self.min_length} characters long'
            return result
        if len(trimmed) > self.max_length:
            result['message'] = f'{entity_type} name must be no more than {self.max_length} characters long'
            return result
        if normalized in self.reserved_words:
            result['message'] = f'{entity_type} name cannot be a reserved word'
            return result
        if not _ALLOWED.match(trimmed):
            result['message'] = (
                f'{entity_type} name can only contain letters, numbers, spaces, hyphens, and underscores'
            )
            return result
        if _CONSECUTIVE_SPECIAL.search(trimmed):
            result['message'] = f'{entity_type} name cannot have consecutive special characters'
            return result
        if _EDGE_SPECIAL.search(trimmed):
            result['message'] = f'{entity_type} name cannot start or end with special characters'
            return result

        result['isValid'] = True
        result['message'] = 'Name is valid'
        result['normalizedName'] = normalized
        result['originalName'] = trimmed
        return result

    def validate_many(self, names: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
        summary: Dict[str, Any] = {'allValid': True, 'results': [], 'errors': []}
        for entry in names:
            name = entry.get('name')
            entity_type = entry.get('type') or 'entity'
            outcome = self.validate(name, entity_type)
            summary['results'].append({'name': name, 'type': entity_type, **outcome})
            if not outcome['isValid']:
                summary['allValid'] = False
                summary['errors'].append(f'{entity_type} "{name}": {outcome["message"]}')
        return summary

    def rules(self) -> Dict[str, Any]:
        return {
            'minLength': self.min_length,
            'maxLength': self.max_length,
            'allowedCharacters': 'Letters, numbers, spaces, hyphens, underscores',
            'reservedWords': sorted(self.reserved_words),
            'examples': {
                'valid': ['Team Alpha', 'Player-1', 'My_Game', 'Team 2024'],
                'invalid': ['', 'A', 'admin', 'Team--Alpha', ' Team', 'Team '],
            },
        }

    def set_custom_rules(self, min_length: Optional[int] = None, max_length: Optional[int] = None,
                         reserved_words: Optional[Iterable[str]] = None) -> None:
        if min_length:
            self.min_length = min_length
        if max_length:
            self.max_length = max_length
        if reserved_words is not None:
            self.reserved_words = set(reserved_words)


default_validator = NameValidator()


def validate_name(name: Any, entity_type: str = 'entity') -> Dict[str, Any]:
    return default_validator.validate(name, entity_type)


def validate_names(names: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    return default_validator.validate_many(names)


def validation_rules() -> Dict[str, Any]:
    return default_validator.rules()


def names_equivalent(first: Any, second: Any) -> bool:
    if not first or not second or not isinstance(first, str) or not isinstance(second, str):
        return False
    return first.strip().lower() == second.strip().lower()


def suggest_unique_name(base: Optional[str], existing: Iterable[str] = ()) -> str:
    """Append an increasing counter to ``base`` until it is not in ``existing`` (case-insensitive)."""
    taken = {n.lower() for n in existing}
    clean = _DISALLOWED.sub('', (base or '').strip()) or 'NewEntity'
    suggestion = clean
    counter = 1
    while suggestion.lower() in taken:
        suggestion = f'{clean}{counter}'
        counter += 1
    return suggestion
