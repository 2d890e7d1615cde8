import random
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Iterator, List, Optional

from drawit.errors import ConflictError, NotFoundError, StateError, ValidationError

TEAM_COLORS = [
    '#FF6B6B', '#4ECDC4', '#45B7D1', '#96CEB4',
    '#FFEAA7', '#DDA0DD', '#98D8C8', '#F7DC6F',
]
ACTIVITY_WINDOW = timedelta(minutes=5)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(ts: datetime) -> str:
    return ts.isoformat().replace('+00:00', 'Z')


def _check_identity(entity_id, name) -> None:
    if not entity_id or not name:
        raise ValidationError('Entity requires both id and name')


def _checked_name(name) -> str:
    """Validate a replacement name and return it trimmed."""
    if not name or not isinstance(name, str):
        raise ValidationError('Name must be a non-empty string')
    if not 2 <= len(name) <= 50:
        raise ValidationError('Name must be between 2 and 50 characters')
    return name.strip()


def _same_entity(entity, other):
    # Records of the same kind are equal when their ids match
    if type(other) is not type(entity):
        return NotImplemented
    return entity.id == other.id


def _entity_dict(entity, type_name: str) -> dict:
    """Fields every serialized game, team and player share."""
    return {
        'id': entity.id,
        'name': entity.name,
        'type': type_name,
        'createdAt': to_iso(entity.created_at),
    }


class GameState(str, Enum):
    WAITING = 'waiting'
    PLAYING = 'playing'
    PAUSED = 'paused'
    FINISHED = 'finished'


class Player:
    def __init__(self, player_id: str, name: str, team_id: Optional[str] = None):
        _check_identity(player_id, name)
        self.id = player_id
        self.name = name
        self.created_at = utc_now()
        # Lookup key into the owning game's teams, not an ownership link
        self.team_id = team_id
        self.score = 0
        self.is_drawing = False
        self.is_ready = False
        self.last_activity = self.created_at

    def join_team(self, team_id: str) -> None:
        if not team_id:
            raise ValidationError('Team ID is required')
        self.team_id = team_id
        self._touch()

    def leave_team(self) -> None:
        self.team_id = None
        self.is_drawing = False
        self._touch()

    def set_drawing(self, is_drawing: bool) -> None:
        self.is_drawing = bool(is_drawing)
        self._touch()

    def set_ready(self, is_ready: bool) -> None:
        self.is_ready = bool(is_ready)
        self._touch()

    def add_score(self, points: int) -> None:
        if points < 0:
            raise ValidationError('Score cannot be negative')
        self.score += points
        self._touch()

    def reset_score(self) -> None:
        self.score = 0
        self._touch()

    def is_active(self, now: Optional[datetime] = None) -> bool:
        now = now or utc_now()
        return now - self.last_activity < ACTIVITY_WINDOW

    def status(self) -> dict:
        return {
            'name': self.name,
            'score': self.score,
            'isDrawing': self.is_drawing,
            'isReady': self.is_ready,
            'isActive': self.is_active(),
        }

    def update_name(self, name: str) -> None:
        self.name = _checked_name(name)
        self._touch()

    def _touch(self) -> None:
        self.last_activity = utc_now()

    def __eq__(self, other):
        return _same_entity(self, other)

    def __hash__(self):
        return hash(self.id)

    def to_dict(self) -> dict:
        data = _entity_dict(self, 'Player')
        data.update({
            'teamId': self.team_id,
            'score': self.score,
            'isDrawing': self.is_drawing,
            'isReady': self.is_ready,
            'isActive': self.is_active(),
            'lastActivity': to_iso(self.last_activity),
        })
        return data


class Team:
    def __init__(self, team_id: str, name: str, color: Optional[str] = None):
        _check_identity(team_id, name)
        self.id = team_id
        self.name = name
        self.created_at = utc_now()
        self._players: Dict[str, Player] = {}
        self.score = 0
        self.color = color or random.choice(TEAM_COLORS)
        self.is_active = True
        self.last_activity = self.created_at

    @property
    def players(self) -> List[Player]:
        return list(self._players.values())

    @property
    def player_count(self) -> int:
        return len(self._players)

    def __iter__(self) -> Iterator[Player]:
        return iter(self.players)

    def add_player(self, player: Player) -> None:
        if player is None or not getattr(player, 'id', None):
            raise ValidationError('Valid player object is required')
        if player.id in self._players:
            raise ConflictError('Player is already in this team')
        self._players[player.id] = player
        player.join_team(self.id)
        self._touch()

    def remove_player(self, player_id: str) -> Player:
        player = self._players.get(player_id)
        if player is None:
            raise NotFoundError('Player not found in team')
        player.leave_team()
        del self._players[player_id]
        self._touch()
        return player

    def get_player(self, player_id: str) -> Optional[Player]:
        return self._players.get(player_id)

    def has_player(self, player_id: str) -> bool:
        return player_id in self._players

    def add_score(self, points: int) -> None:
        if points < 0:
            raise ValidationError('Score cannot be negative')
        self.score += points
        self._touch()

    def reset_score(self) -> None:
        self.score = 0
        self._touch()

    def set_active(self, is_active: bool) -> None:
        self.is_active = bool(is_active)
        self._touch()

    def is_ready(self) -> bool:
        # An empty team is never ready
        if not self._players:
            return False
        return all(p.is_ready for p in self._players.values())

    def active_players(self) -> List[Player]:
        return [p for p in self._players.values() if p.is_active()]

    def summary(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'playerCount': self.player_count,
            'score': self.score,
            'color': self.color,
            'isActive': self.is_active,
            'isReady': self.is_ready(),
        }

    def update_name(self, name: str) -> None:
        self.name = _checked_name(name)
        self._touch()

    def _touch(self) -> None:
        self.last_activity = utc_now()

    def __eq__(self, other):
        return _same_entity(self, other)

    def __hash__(self):
        return hash(self.id)

    def to_dict(self) -> dict:
        data = _entity_dict(self, 'Team')
        data.update({
            'playerCount': self.player_count,
            'players': [p.to_dict() for p in self._players.values()],
            'score': self.score,
            'color': self.color,
            'isActive': self.is_active,
            'isReady': self.is_ready(),
        })
        return data


def default_settings() -> dict:
    return {
        'allowSpectators': True,
        'enableChat': True,
        'showScores': True,
    }


class Game:
    """A single drawing game: its teams, players and round progression.

    The game owns both the team and player collections. Teams hold the same
    player objects as the game, and players point back at their team by id
    only.
    """

    def __init__(self, game_id: str, name: str, max_teams: int = 4, max_players_per_team: int = 6,
                 max_rounds: int = 10, round_time_limit: int = 60, settings: Optional[dict] = None):
        _check_identity(game_id, name)
        self.id = game_id
        self.name = name
        self.created_at = utc_now()
        self._teams: Dict[str, Team] = {}
        self._players: Dict[str, Player] = {}
        self.max_teams = max_teams
        self.max_players_per_team = max_players_per_team
        self.max_rounds = max_rounds
        self.round_time_limit = round_time_limit
        self.state = GameState.WAITING
        self.current_round = 0
        self.current_word: Optional[str] = None
        self.current_drawer_id: Optional[str] = None
        self.settings = default_settings()
        for key, value in (settings or {}).items():
            if key not in self.settings:
                continue
            if not isinstance(value, bool):
                raise ValidationError(f'{key} must be a boolean')
            self.settings[key] = value
        self.last_activity = self.created_at

    @property
    def teams(self) -> List[Team]:
        return list(self._teams.values())

    @property
    def players(self) -> List[Player]:
        return list(self._players.values())

    @property
    def current_drawer(self) -> Optional[Player]:
        if self.current_drawer_id is None:
            return None
        return self._players.get(self.current_drawer_id)

    def __iter__(self) -> Iterator[Team]:
        return iter(self.teams)

    # ---- state machine ----

    def start_game(self) -> None:
        if len(self._teams) < 2:
            raise StateError('At least 2 teams required to start game')
        if not all(team.is_ready() for team in self._teams.values()):
            raise StateError('All teams must be ready to start game')
        if self.state != GameState.WAITING:
            raise StateError(f'Cannot start a game that is {self.state.value}')
        self.state = GameState.PLAYING
        self.current_round = 1
        self._select_next_drawer()
        self._touch()

    def pause_game(self) -> None:
        if self.state != GameState.PLAYING:
            raise StateError('Only a game in progress can be paused')
        self.state = GameState.PAUSED
        self._touch()

    def resume_game(self) -> None:
        if self.state != GameState.PAUSED:
            raise StateError('Only a paused game can be resumed')
        self.state = GameState.PLAYING
        self._touch()

    def end_game(self) -> None:
        drawer = self.current_drawer
        if drawer is not None:
            drawer.set_drawing(False)
        self.state = GameState.FINISHED
        self.current_drawer_id = None
        self.current_word = None
        self._touch()

    def next_round(self) -> None:
        if self.state != GameState.PLAYING:
            raise StateError('Game must be in playing state to advance round')
        if self.current_round >= self.max_rounds:
            self.end_game()
            return
        self.current_round += 1
        self._select_next_drawer()
        self._touch()

    def set_current_word(self, word: str) -> None:
        if not word or not isinstance(word, str) or not word.strip():
            raise ValidationError('Valid word is required')
        self.current_word = word.strip().lower()
        self._touch()

    # ---- teams ----

    def create_team(self, team_id: str, name: str, color: Optional[str] = None) -> Team:
        if team_id in self._teams:
            raise ConflictError('Team with this ID already exists')
        if len(self._teams) >= self.max_teams:
            raise ConflictError('Maximum number of teams reached')
        team = Team(team_id, name, color)
        self._teams[team_id] = team
        self._touch()
        return team

    def remove_team(self, team_id: str) -> Team:
        """Remove a team and evict its players from the game. Returns the removed team."""
        team = self._teams.get(team_id)
        if team is None:
            raise NotFoundError('Team not found')
        for player in team.players:
            self._players.pop(player.id, None)
            if player.id == self.current_drawer_id:
                self.current_drawer_id = None
        del self._teams[team_id]
        self._touch()
        return team

    def get_team(self, team_id: str) -> Optional[Team]:
        return self._teams.get(team_id)

    # ---- players ----

    def add_player(self, player_id: str, name: str, team_id: Optional[str] = None) -> Player:
        if player_id in self._players:
            raise ConflictError('Player with this ID already exists')
        team = self._teams.get(team_id) if team_id else None
        if team is not None:
            self._check_team_capacity(team)
        player = Player(player_id, name, team_id)
        self._players[player_id] = player
        if team is not None:
            team.add_player(player)
        self._touch()
        return player

    def remove_player(self, player_id: str) -> Player:
        player = self._players.get(player_id)
        if player is None:
            raise NotFoundError('Player not found')
        team = self._teams.get(player.team_id) if player.team_id else None
        if team is not None and team.has_player(player_id):
            team.remove_player(player_id)
        if player_id == self.current_drawer_id:
            self.current_drawer_id = None
        del self._players[player_id]
        self._touch()
        return player

    def assign_player(self, player_id: str, team_id: str) -> Player:
        player = self._require_player(player_id)
        team = self._teams.get(team_id)
        if team is None:
            raise NotFoundError('Team not found')
        if team.has_player(player_id):
            raise ConflictError('Player is already in this team')
        self._check_team_capacity(team)
        self.unassign_player(player_id)
        team.add_player(player)
        self._touch()
        return player

    def unassign_player(self, player_id: str) -> Player:
        player = self._require_player(player_id)
        team = self._teams.get(player.team_id) if player.team_id else None
        if team is not None and team.has_player(player_id):
            team.remove_player(player_id)
        else:
            player.leave_team()
        if player_id == self.current_drawer_id:
            self.current_drawer_id = None
        self._touch()
        return player

    def set_player_ready(self, player_id: str, ready: bool = True) -> Player:
        player = self._require_player(player_id)
        player.set_ready(ready)
        self._touch()
        return player

    def get_player(self, player_id: str) -> Optional[Player]:
        return self._players.get(player_id)

    # ---- helpers ----

    def _require_player(self, player_id: str) -> Player:
        player = self._players.get(player_id)
        if player is None:
            raise NotFoundError('Player not found')
        return player

    def _check_team_capacity(self, team: Team) -> None:
        if team.player_count >= self.max_players_per_team:
            raise ConflictError('Team is full')

    def _select_next_drawer(self) -> None:
        """Round-robin over players on an existing team, starting after the current drawer."""
        eligible = [p for p in self._players.values() if p.team_id and p.team_id in self._teams]
        previous = self.current_drawer
        if previous is not None:
            previous.set_drawing(False)
        if not eligible:
            self.current_drawer_id = None
            return
        ids = [p.id for p in eligible]
        try:
            index = ids.index(self.current_drawer_id) + 1
        except ValueError:
            index = 0
        drawer = eligible[index % len(eligible)]
        self.current_drawer_id = drawer.id
        drawer.set_drawing(True)

    def update_name(self, name: str) -> None:
        self.name = _checked_name(name)
        self._touch()

    def _touch(self) -> None:
        self.last_activity = utc_now()

    def __eq__(self, other):
        return _same_entity(self, other)

    def __hash__(self):
        return hash(self.id)

    def summary(self) -> dict:
        drawer = self.current_drawer
        return {
            'id': self.id,
            'name': self.name,
            'gameState': self.state.value,
            'teamCount': len(self._teams),
            'playerCount': len(self._players),
            'currentRound': self.current_round,
            'maxRounds': self.max_rounds,
            'currentDrawer': drawer.name if drawer else None,
        }

    def to_dict(self) -> dict:
        drawer = self.current_drawer
        data = _entity_dict(self, 'Game')
        data.update({
            'teams': [t.to_dict() for t in self._teams.values()],
            'players': [p.to_dict() for p in self._players.values()],
            'gameState': self.state.value,
            'currentRound': self.current_round,
            'maxRounds': self.max_rounds,
            'maxTeams': self.max_teams,
            'maxPlayersPerTeam': self.max_players_per_team,
            'roundTimeLimit': self.round_time_limit,
            'currentWord': self.current_word,
            'currentDrawer': drawer.to_dict() if drawer else None,
            'gameSettings': dict(self.settings),
            'lastActivity': to_iso(self.last_activity),
        })
        return data
