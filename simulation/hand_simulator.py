from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

from engine.errors import IllegalStateError
from engine.models import Player, RoundSummary, TableConfig
from engine.table import Table
from engine.turns import TurnController

from .strategies import ActionEnvironment, Strategy, notify_hand_completed

LOGGER = logging.getLogger("simulation.hand")


class HandSimulator:
    """Plays complete hands between strategies on one table.

    Players are seated once, when the simulator is built; bankrolls and the
    dealer button carry over from one ``run_simulation`` call to the next.
    """

    def __init__(
        self,
        players: Mapping[Player, Strategy],
        config: Optional[TableConfig] = None,
        table: Optional[Table] = None,
    ) -> None:
        self.strategies: Dict[Player, Strategy] = dict(players)
        self.table = table or Table()
        self.controller = TurnController(self.table, config)
        self.table.add_players(list(self.strategies))

    def run_simulation(self) -> RoundSummary:
        controller = self.controller
        view = controller.read_only_view()
        controller.start_new_hand()

        while controller.is_round_active():
            player = controller.next_to_act()
            environment = ActionEnvironment(controller, player)
            self.strategies[player].execute_turn(view, environment)
            if not environment.took_action:
                raise IllegalStateError(f"Strategy for player {player.player_id} finished its turn without acting")

        summary = controller.conclude_round()
        LOGGER.debug(
            "Hand over: pot=%s winners=%s board=%s",
            summary.total_pot_size,
            sorted(player.player_id for player in summary.winners),
            " ".join(card.label for card in summary.community_cards),
        )
        for strategy in self.strategies.values():
            notify_hand_completed(strategy, view, summary)
        return summary
