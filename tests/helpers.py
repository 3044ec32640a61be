from __future__ import annotations

import random
from typing import List, Tuple

from engine.cards import Card, parse_card_text
from engine.models import Action, Player, TableConfig
from engine.table import Table
from engine.turns import TurnController


def cards(text: str) -> List[Card]:
    return parse_card_text(text)


def make_players(count: int = 4, bankroll: int = 1_000) -> List[Player]:
    """Players with ids 1..count so seat index and id never coincide."""
    return [Player(idx + 1, bankroll) for idx in range(count)]


def create_table(count: int = 4, bankroll: int = 1_000, seed: int = 42) -> Tuple[Table, List[Player]]:
    table = Table(rng=random.Random(seed))
    players = make_players(count, bankroll)
    table.add_players(players)
    return table, players


def create_controller(
    count: int = 4,
    bankroll: int = 1_000,
    sb: int = 10,
    bb: int = 20,
    seed: int = 42,
) -> Tuple[TurnController, List[Player]]:
    table, players = create_table(count, bankroll, seed)
    return TurnController(table, TableConfig(small_blind=sb, big_blind=bb)), players


def check_or_call_down(controller: TurnController) -> None:
    """Advance the current hand with passive actions until betting is over."""
    while controller.is_round_active():
        player = controller.next_to_act()
        action = Action.CALL if controller.table.amount_to_call(player) else Action.CHECK
        controller.player_action(player, action)
