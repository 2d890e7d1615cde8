import logging
import threading
from typing import Any, Dict, List, Optional, Set
from uuid import uuid4

from drawit.errors import ConflictError, NotFoundError, StateError, ValidationError
from drawit.models import Game, Player, Team, to_iso, utc_now
from .registry import NameRegistry, normalize_name
from .validation import NameValidator, default_validator

logger = logging.getLogger(__name__)

# Wire option name -> Game keyword
_INT_OPTIONS = {
    'maxTeams': 'max_teams',
    'maxPlayersPerTeam': 'max_players_per_team',
    'maxRounds': 'max_rounds',
    'roundTimeLimit': 'round_time_limit',
}


class GameDirectory:
    """Holds the one active game, the archive of ended games and the name registry.

    One instance is created per application and handed to the HTTP and
    Socket.IO layers; nothing here is module-global. HTTP requests and
    socket events arrive on separate threads, so every mutation runs under
    ``lock``. Callers that change the active game directly hold it too.
    """

    def __init__(self, defaults: Optional[Dict[str, int]] = None,
                 validator: Optional[NameValidator] = None) -> None:
        self.defaults: Dict[str, int] = dict(defaults or {})
        self.validator = validator or default_validator
        self.registry = NameRegistry()
        self._current_game: Optional[Game] = None
        self._history: List[Dict[str, Any]] = []
        # Names reserved on behalf of the active game's teams and players
        self._game_names: Set[str] = set()
        self._initialized = False
        self.lock = threading.RLock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        with self.lock:
            if self._initialized:
                raise StateError('Game directory is already initialized')
            self._initialized = True
        logger.info('[directory-init] ready')

    def reset(self) -> None:
        with self.lock:
            self._current_game = None
            self._history = []
            self._game_names = set()
            self.registry.clear()
            self._initialized = False

    # ---- active game ----

    def create_game(self, name, options: Optional[Dict[str, Any]] = None) -> Game:
        with self.lock:
            if not self._initialized:
                raise StateError('Game directory must be initialized first')
            if self._current_game is not None:
                raise ConflictError('A game is already in progress. Only one game instance allowed.')
            if not name or not isinstance(name, str) or not name.strip():
                raise ValidationError('Valid game name is required')
            if self.registry.contains(name):
                raise ConflictError('Game name must be unique')

            game = Game(str(uuid4()), name.strip(), **self._game_kwargs(options or {}))
            self.registry.register(name)
            self._current_game = game
            self._game_names = set()
        logger.info(f'[game-created] id={game.id} name={game.name!r}')
        return game

    def get_current_game(self) -> Optional[Game]:
        return self._current_game

    def require_current_game(self) -> Game:
        game = self._current_game
        if game is None:
            raise NotFoundError('No active game')
        return game

    def end_current_game(self) -> Optional[Game]:
        with self.lock:
            game = self._current_game
            if game is None:
                return None
            game.end_game()
            self._history.append({'game': game.to_dict(), 'endedAt': to_iso(utc_now())})
            self.registry.unregister(game.name)
            for reserved in self._game_names:
                self.registry.unregister(reserved)
            self._game_names = set()
            self._current_game = None
            archived = len(self._history)
        logger.info(f'[game-ended] id={game.id} round={game.current_round} archived={archived}')
        return game

    def get_game_history(self) -> List[Dict[str, Any]]:
        with self.lock:
            return list(self._history)

    # ---- names ----

    def is_name_unique(self, name) -> bool:
        if not name or not isinstance(name, str) or not name.strip():
            return False
        return not self.registry.contains(name)

    def register_unique_name(self, name) -> bool:
        with self.lock:
            self.registry.register(name)
        return True

    def unregister_unique_name(self, name) -> None:
        with self.lock:
            self.registry.unregister(name)

    # ---- teams and players with name bookkeeping ----

    def add_team(self, name, team_id: Optional[str] = None, color: Optional[str] = None) -> Team:
        with self.lock:
            game = self.require_current_game()
            clean = self._check_name(name, 'Team')
            team = game.create_team(team_id or str(uuid4()), clean, color)
            self._reserve(clean)
        return team

    def remove_team(self, team_id: str) -> Team:
        with self.lock:
            game = self.require_current_game()
            team = game.remove_team(team_id)
            self._release(team.name)
            for player in team.players:
                self._release(player.name)
        return team

    def add_player(self, name, player_id: Optional[str] = None, team_id: Optional[str] = None) -> Player:
        with self.lock:
            game = self.require_current_game()
            clean = self._check_name(name, 'Player')
            player = game.add_player(player_id or str(uuid4()), clean, team_id)
            self._reserve(clean)
        return player

    def remove_player(self, player_id: str) -> Player:
        with self.lock:
            game = self.require_current_game()
            player = game.remove_player(player_id)
            self._release(player.name)
        return player

    def _check_name(self, name, entity_type: str) -> str:
        outcome = self.validator.validate(name, entity_type)
        if not outcome['isValid']:
            raise ValidationError(outcome['message'])
        if self.registry.contains(outcome['originalName']):
            raise ConflictError(f'{entity_type} name must be unique')
        return outcome['originalName']

    def _reserve(self, name: str) -> None:
        self.registry.register(name)
        self._game_names.add(normalize_name(name))

    def _release(self, name: str) -> None:
        key = normalize_name(name)
        if key in self._game_names:
            self._game_names.discard(key)
            self.registry.unregister(key)

    def _game_kwargs(self, options: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(options, dict):
            raise ValidationError('Game options must be an object')
        kwargs: Dict[str, Any] = {}
        for option, keyword in _INT_OPTIONS.items():
            value = options.get(option)
            if value is None:
                value = self.defaults.get(keyword)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValidationError(f'{option} must be a positive integer')
            kwargs[keyword] = value
        settings = options.get('settings')
        if settings is not None:
            if not isinstance(settings, dict):
                raise ValidationError('settings must be an object')
            kwargs['settings'] = settings
        return kwargs

    # ---- reporting ----

    def get_statistics(self) -> Dict[str, Any]:
        with self.lock:
            game = self._current_game
            return {
                'initialized': self._initialized,
                'hasActiveGame': game is not None,
                'totalGamesPlayed': len(self._history),
                'uniqueNamesCount': len(self.registry),
                'currentGameSummary': game.summary() if game else None,
            }
