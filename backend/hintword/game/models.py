from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


LobbyStatus = Literal["waiting", "playing", "roundEnded", "ended"]

MAX_NAME_LENGTH = 20
MIN_PLAYERS_TO_START = 2

# (low, high) inclusive, in seconds / players
TIME_LIMIT_RANGE = (30, 300)
HINT_INTERVAL_RANGE = (5, 60)
MAX_PLAYERS_RANGE = (2, 16)


@dataclass
class Player:
    id: str
    name: str
    score: int = 0


@dataclass
class Settings:
    time_limit: int = 60
    hint_interval: int = 15
    max_players: int = 8


@dataclass
class RoundWinner:
    id: str
    name: str
    score: int
    round_score: int


@dataclass
class GameWinner:
    id: str
    name: str
    score: int


@dataclass
class RoundState:
    status: LobbyStatus = "waiting"
    round: int = 0
    current_word: str | None = None
    # Drawn with the word; never changes during the round.
    hint_list: tuple[str, ...] = ()
    hints: list[str] = field(default_factory=list)
    hint_index: int = 0
    start_time: float | None = None
    time_remaining: int | None = None
    round_winner: RoundWinner | None = None
    winner: GameWinner | None = None

    @property
    def hints_exhausted(self) -> bool:
        return self.hint_index >= len(self.hint_list)


@dataclass
class Lobby:
    id: str
    host_id: str
    players: list[Player] = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)
    state: RoundState = field(default_factory=RoundState)

    def get_player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def has_player(self, player_id: str) -> bool:
        return self.get_player(player_id) is not None
