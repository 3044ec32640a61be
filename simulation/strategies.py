from __future__ import annotations

import random
from typing import Callable, Dict, Optional, Protocol, runtime_checkable

from engine.errors import IllegalArgumentError, IllegalStateError
from engine.models import Action, Player, RoundSummary
from engine.table import ReadOnlyTable
from engine.turns import TurnController

from .equity import MonteCarloEquityEvaluator


class ActionEnvironment:
    """The moves available to the strategy whose turn it is.

    Every call acts for ``current_player`` through the turn controller. The
    convenience moves fall back instead of failing: ``check_or_fold`` folds
    when checking is illegal and ``call`` drops to ``check_or_fold`` when there
    is nothing (or too much) to call.
    """

    def __init__(self, controller: TurnController, player: Player) -> None:
        self._controller = controller
        self.current_player = player
        self.took_action = False

    def _act(self, action: Action, amount: int = 0) -> None:
        self._controller.player_action(self.current_player, action, amount)
        self.took_action = True

    def fold(self) -> None:
        self._act(Action.FOLD)

    def check(self) -> None:
        self._act(Action.CHECK)

    def check_or_fold(self) -> None:
        try:
            self.check()
        except (IllegalStateError, IllegalArgumentError):
            self.fold()

    def call(self) -> None:
        try:
            self._act(Action.CALL)
        except (IllegalStateError, IllegalArgumentError):
            self.check_or_fold()

    def raise_bet(self, amount: int) -> None:
        self._act(Action.RAISE, amount)


@runtime_checkable
class Strategy(Protocol):
    def execute_turn(self, table: ReadOnlyTable, environment: ActionEnvironment) -> None:
        ...


def notify_hand_completed(strategy: Strategy, table: ReadOnlyTable, summary: RoundSummary) -> None:
    # on_hand_completed is optional on strategies.
    hook = getattr(strategy, "on_hand_completed", None)
    if hook is not None:
        hook(table, summary)


class AlwaysCall:
    def execute_turn(self, table: ReadOnlyTable, environment: ActionEnvironment) -> None:
        environment.call()


class AlwaysCheckOrFold:
    def execute_turn(self, table: ReadOnlyTable, environment: ActionEnvironment) -> None:
        environment.check_or_fold()


class AlwaysFold:
    def execute_turn(self, table: ReadOnlyTable, environment: ActionEnvironment) -> None:
        environment.fold()


class AlwaysRaise:
    """Raise by a fixed amount; calls (or checks) once the stack can no longer cover it."""

    def __init__(self, amount: int = 10) -> None:
        if amount <= 0:
            raise IllegalArgumentError("Raise amount must be positive.")
        self.amount = amount

    def execute_turn(self, table: ReadOnlyTable, environment: ActionEnvironment) -> None:
        try:
            environment.raise_bet(self.amount)
        except (IllegalStateError, IllegalArgumentError):
            environment.call()


class RandomAction:
    """Uniformly picks fold, check-or-fold, call or a small raise."""

    def __init__(self, rng: Optional[random.Random] = None, max_raise: int = 20) -> None:
        self.rng = rng or random.Random()
        self.max_raise = max_raise

    def execute_turn(self, table: ReadOnlyTable, environment: ActionEnvironment) -> None:
        choice = self.rng.randrange(4)
        if choice == 0:
            environment.fold()
        elif choice == 1:
            environment.check_or_fold()
        elif choice == 2:
            environment.call()
        else:
            try:
                environment.raise_bet(self.rng.randint(1, self.max_raise))
            except (IllegalStateError, IllegalArgumentError):
                environment.call()


class PotOddsStrategy:
    """Continue only when estimated equity beats the price the pot is offering.

    Equity comes from a short Monte Carlo run against the number of opponents
    still in the hand. Strong hands raise half the pot.
    """

    def __init__(self, num_simulations: int = 200, raise_threshold: float = 0.7, seed: Optional[int] = None) -> None:
        self.evaluator = MonteCarloEquityEvaluator(num_simulations=num_simulations, seed=seed)
        self.raise_threshold = raise_threshold

    def execute_turn(self, table: ReadOnlyTable, environment: ActionEnvironment) -> None:
        player = environment.current_player
        equity = self.evaluator.evaluate(
            len(table.active_players),
            table.hole_cards_for(player),
            table.community_cards,
        )
        to_call = table.amount_to_call(player)
        pot = table.pot_total()

        if equity >= self.raise_threshold:
            amount = max(pot // 2, 1)
            if table.current_bet + amount - table.round_bets.get(player, 0) <= player.bankroll:
                environment.raise_bet(amount)
                return
        if to_call == 0:
            environment.check_or_fold()
        elif equity >= to_call / (pot + to_call):
            environment.call()
        else:
            environment.fold()


STRATEGIES: Dict[str, Callable[[], Strategy]] = {
    "call": AlwaysCall,
    "check": AlwaysCheckOrFold,
    "fold": AlwaysFold,
    "raise": AlwaysRaise,
    "random": RandomAction,
    "potodds": PotOddsStrategy,
}


def build_strategy(name: str) -> Strategy:
    try:
        factory = STRATEGIES[name.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown strategy {name!r}; choose from {', '.join(sorted(STRATEGIES))}") from None
    return factory()
