from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Mapping, Tuple

from .cards import Card
from .errors import IllegalArgumentError


class Phase(str, Enum):
    PREFLOP = "PREFLOP"
    FLOP = "FLOP"
    TURN = "TURN"
    RIVER = "RIVER"
    SHOWDOWN = "SHOWDOWN"


class Action(str, Enum):
    FOLD = "FOLD"
    CHECK = "CHECK"
    CALL = "CALL"
    RAISE = "RAISE"


@dataclass
class TableConfig:
    small_blind: int = 1
    big_blind: int = 2
    starting_bankroll: int = 1_000

    def validate(self) -> None:
        if self.small_blind <= 0 or self.big_blind <= 0:
            raise IllegalArgumentError("Blinds must be positive values.")
        if self.big_blind <= self.small_blind:
            raise IllegalArgumentError("Big blind must be greater than small blind.")
        if self.starting_bankroll < 0:
            raise IllegalArgumentError("Starting bankroll cannot be negative.")


@dataclass(eq=False)
class Player:
    """A seat holder. Identity is the id; the bankroll moves from hand to hand."""

    player_id: int
    bankroll: int = 1_000

    def __post_init__(self) -> None:
        if self.bankroll < 0:
            raise IllegalArgumentError("Bankroll cannot be negative")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Player):
            return NotImplemented
        return self.player_id == other.player_id

    def __hash__(self) -> int:
        return hash(self.player_id)

    def credit(self, amount: int) -> None:
        if amount < 0:
            raise IllegalArgumentError("Cannot credit a negative amount")
        self.bankroll += amount

    def debit(self, amount: int) -> None:
        if amount < 0:
            raise IllegalArgumentError("Cannot debit a negative amount")
        if amount > self.bankroll:
            raise IllegalArgumentError(f"Insufficient funds! {amount} > {self.bankroll}")
        self.bankroll -= amount


@dataclass(frozen=True)
class RoundSummary:
    community_cards: Tuple[Card, ...]
    hole_cards: Mapping[Player, Tuple[Card, ...]]
    folded_players: FrozenSet[Player]
    player_bets: Mapping[Player, int]
    total_pot_size: int
    winners: FrozenSet[Player]
    payouts: Mapping[Player, int] = field(default_factory=dict)

    def net_result(self, player: Player) -> int:
        return self.payouts.get(player, 0) - self.player_bets.get(player, 0)
