"""
Game error hierarchy.

- GameError (base for everything the game layer raises)
  - ValidationError   bad, missing or malformed argument
  - ConflictError     duplicate name or id, game already active, team full
  - NotFoundError     missing game, team or player
  - StateError        operation not allowed in the current state

The message is shown to clients verbatim.
"""


class GameError(Exception):
    """Base exception for game errors."""
    status_code: int = 400

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(GameError):
    status_code = 400


class ConflictError(GameError):
    status_code = 409


class NotFoundError(GameError):
    status_code = 404


class StateError(GameError):
    status_code = 409
