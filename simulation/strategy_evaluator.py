from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from engine.models import Player, TableConfig
from engine.table import Table

from .hand_simulator import HandSimulator
from .strategies import Strategy

LOGGER = logging.getLogger("simulation.strategies")


@dataclass
class StrategyResults:
    wins: int = 0
    losses: int = 0
    draws: int = 0
    chip_difference: int = 0
    hands_played: int = 0


class StrategyEvaluator:
    """Backtest a fixed seat -> strategy assignment over many hands.

    Bankrolls compound across hands on one table. A player that can no longer
    cover the big blind sits out for the rest of the run, and the run stops
    early once fewer than two players can post.
    """

    def __init__(
        self,
        players: Mapping[Player, Strategy],
        num_simulations: int = 1_000,
        config: Optional[TableConfig] = None,
        table: Optional[Table] = None,
    ) -> None:
        self.players = dict(players)
        self.num_simulations = num_simulations
        self.config = config or TableConfig()
        self.table = table

    def evaluate(self) -> Dict[Player, StrategyResults]:
        self.config.validate()
        results = {player: StrategyResults() for player in self.players}
        starting = {player: player.bankroll for player in self.players}
        simulator = HandSimulator(self.players, self.config, self.table)

        for hand_no in range(1, self.num_simulations + 1):
            self._sit_out_short_stacks(simulator.table)
            if simulator.table.num_players < 2:
                LOGGER.info("Stopping after %s hands: fewer than two players can post the big blind", hand_no - 1)
                break

            LOGGER.debug("Running simulation %s / %s", hand_no, self.num_simulations)
            summary = simulator.run_simulation()
            for player in summary.hole_cards:
                outcome = results[player]
                outcome.hands_played += 1
                if player not in summary.winners:
                    outcome.losses += 1
                elif len(summary.winners) == 1:
                    outcome.wins += 1
                else:
                    outcome.draws += 1

        for player, outcome in results.items():
            outcome.chip_difference = player.bankroll - starting[player]
        LOGGER.info(
            "Evaluated %s players: %s",
            len(results),
            ", ".join(f"{player.player_id}={outcome.chip_difference:+d}" for player, outcome in results.items()),
        )
        return results

    def _sit_out_short_stacks(self, table: Table) -> None:
        for player in list(table.players):
            if player.bankroll < self.config.big_blind:
                LOGGER.info("Player %s sits out with %s chips", player.player_id, player.bankroll)
                table.remove_player(player)
