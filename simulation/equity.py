from __future__ import annotations

import logging
import random
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from engine.cards import Card, parse_card_text
from engine.errors import IllegalArgumentError, IllegalStateError
from engine.models import Player
from engine.table import MAX_COMMUNITY_CARDS, Table

LOGGER = logging.getLogger("simulation.equity")

ProgressListener = Callable[[int, int], None]

DECK_SIZE = 52
HOLE_CARDS = 2


def noop_progress(done: int, total: int) -> None:
    return None


@dataclass
class EquityResult:
    """Tally of hero outcomes across a batch of deals."""

    wins: int = 0
    ties: int = 0
    losses: int = 0
    tie_share: float = 0.0
    simulations: int = 0

    @property
    def equity(self) -> float:
        if not self.simulations:
            return 0.0
        return (self.wins + self.tie_share) / self.simulations

    def record(self, hero: Player, winners: Sequence[Player]) -> None:
        self.simulations += 1
        if hero not in winners:
            self.losses += 1
        elif len(winners) == 1:
            self.wins += 1
        else:
            self.ties += 1
            self.tie_share += 1 / len(winners)

    def merge(self, other: "EquityResult") -> None:
        self.wins += other.wins
        self.ties += other.ties
        self.losses += other.losses
        self.tie_share += other.tie_share
        self.simulations += other.simulations


def deal_out(num_players: int, hero_cards: Sequence[Card], board: Sequence[Card], rng: random.Random) -> List[Player]:
    """Deal one hand to the river without betting and return the winners.

    Player 0 is the hero and always holds ``hero_cards``.
    """
    table = Table(rng=rng)
    players = [Player(idx) for idx in range(num_players)]
    table.add_players(players)
    table.start_new_hand_with_seed({players[0]: list(hero_cards)}, board)
    while len(table.community_cards) < MAX_COMMUNITY_CARDS:
        table.deal_community_cards(3 if not table.community_cards else 1)
    return table.compute_winners()


def simulate_chunk(
    num_players: int,
    hero_cards: Sequence[Card],
    board: Sequence[Card],
    count: int,
    seed: Optional[int],
) -> EquityResult:
    """Run ``count`` deals with a private random source. Safe to ship to a worker process."""
    rng = random.Random(seed)
    hero = Player(0)
    result = EquityResult()
    for _ in range(count):
        result.record(hero, deal_out(num_players, hero_cards, board, rng))
    return result


def validate_deal(num_players: int, hero_cards: Sequence[Card], board: Sequence[Card]) -> None:
    if num_players < 1:
        raise IllegalArgumentError("At least one player is required")
    if len(hero_cards) > HOLE_CARDS:
        raise IllegalArgumentError(f"At most {HOLE_CARDS} hole cards allowed, got {len(hero_cards)}")
    if len(board) > MAX_COMMUNITY_CARDS:
        raise IllegalArgumentError(f"At most {MAX_COMMUNITY_CARDS} community cards allowed, got {len(board)}")
    known = list(hero_cards) + list(board)
    if len(set(known)) != len(known):
        raise IllegalArgumentError("Hole and community cards contain duplicates")
    if num_players * HOLE_CARDS + MAX_COMMUNITY_CARDS > DECK_SIZE:
        raise IllegalArgumentError(f"Not enough cards in the deck for {num_players} players")


class MonteCarloEquityEvaluator:
    """Estimate the hero's share of the pot by dealing random run-outs.

    Each deal uses a brand new table, so the only state carried between deals
    is the random source. With ``workers`` above one the deals are split into
    one chunk per worker process, each with its own seed derived from
    ``seed``.
    """

    def __init__(self, num_simulations: int = 100_000, seed: Optional[int] = None, workers: int = 1) -> None:
        if num_simulations < 1:
            raise IllegalArgumentError("num_simulations must be positive")
        if workers < 1:
            raise IllegalArgumentError("workers must be positive")
        self.num_simulations = num_simulations
        self.seed = seed
        self.workers = workers

    def evaluate(
        self,
        num_players: int,
        hero_hole_cards: Sequence[Card],
        known_community_cards: Sequence[Card] = (),
        progress_listener: ProgressListener = noop_progress,
    ) -> float:
        return self.run(num_players, hero_hole_cards, known_community_cards, progress_listener).equity

    def run(
        self,
        num_players: int,
        hero_hole_cards: Sequence[Card],
        known_community_cards: Sequence[Card] = (),
        progress_listener: ProgressListener = noop_progress,
    ) -> EquityResult:
        validate_deal(num_players, hero_hole_cards, known_community_cards)
        total = self.num_simulations
        if num_players == 1:
            # Nobody to beat.
            return EquityResult(wins=total, simulations=total)

        LOGGER.debug(
            "Evaluating %s vs %s opponents on [%s] (%s deals, %s workers)",
            " ".join(card.label for card in hero_hole_cards),
            num_players - 1,
            " ".join(card.label for card in known_community_cards),
            total,
            self.workers,
        )
        if self.workers > 1 and total > 1:
            result = self._run_parallel(num_players, hero_hole_cards, known_community_cards, progress_listener)
        else:
            result = self._run_serial(num_players, hero_hole_cards, known_community_cards, progress_listener)
        LOGGER.debug("Equity %.4f (wins=%s ties=%s losses=%s)", result.equity, result.wins, result.ties, result.losses)
        return result

    def _run_serial(
        self,
        num_players: int,
        hero_cards: Sequence[Card],
        board: Sequence[Card],
        progress_listener: ProgressListener,
    ) -> EquityResult:
        rng = random.Random(self.seed)
        hero = Player(0)
        result = EquityResult()
        for index in range(1, self.num_simulations + 1):
            result.record(hero, deal_out(num_players, hero_cards, board, rng))
            progress_listener(index, self.num_simulations)
        return result

    def _run_parallel(
        self,
        num_players: int,
        hero_cards: Sequence[Card],
        board: Sequence[Card],
        progress_listener: ProgressListener,
    ) -> EquityResult:
        total = self.num_simulations
        workers = min(self.workers, total)
        chunk = total // workers
        sizes = [chunk] * (workers - 1) + [total - chunk * (workers - 1)]
        base_seed = self.seed if self.seed is not None else random.randrange(2**31)

        result = EquityResult()
        with ProcessPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(simulate_chunk, num_players, list(hero_cards), list(board), size, base_seed + idx + 1)
                for idx, size in enumerate(sizes)
            ]
            for future in as_completed(futures):
                result.merge(future.result())
                progress_listener(result.simulations, total)
        return result


class HandEquityCalculator:
    """Interactive equity session: hole cards, board and opponent count kept between queries."""

    def __init__(self, evaluator: Optional[MonteCarloEquityEvaluator] = None, num_opponents: int = 1) -> None:
        self.evaluator = evaluator or MonteCarloEquityEvaluator()
        self.num_opponents = num_opponents
        self.hole_cards: List[Card] = []
        self.community_cards: List[Card] = []

    def set_hole_cards(self, text: str) -> None:
        if not text.strip():
            return
        cards = parse_card_text(text)
        if len(cards) > HOLE_CARDS:
            raise IllegalArgumentError(f"At most {HOLE_CARDS} hole cards allowed, got {len(cards)}")
        self.hole_cards = cards

    def set_community_cards(self, text: str) -> None:
        if not text.strip():
            return
        self.community_cards = self._checked_board(parse_card_text(text))

    def add_community_cards(self, text: str) -> None:
        if not text.strip():
            return
        self.community_cards = self._checked_board(self.community_cards + parse_card_text(text))

    def set_num_opponents(self, num_opponents: int) -> None:
        if num_opponents < 0:
            raise IllegalArgumentError("Number of opponents cannot be negative")
        self.num_opponents = num_opponents

    def reset(self) -> None:
        self.num_opponents = 1
        self.hole_cards = []
        self.community_cards = []

    def compute_current_equity(self, progress_listener: ProgressListener = noop_progress) -> float:
        if not self.hole_cards:
            raise IllegalStateError("Must set hole cards before computing equity")
        return self.evaluator.evaluate(
            1 + self.num_opponents,
            self.hole_cards,
            self.community_cards,
            progress_listener,
        )

    @staticmethod
    def _checked_board(cards: List[Card]) -> List[Card]:
        if len(cards) > MAX_COMMUNITY_CARDS:
            raise IllegalArgumentError(f"At most {MAX_COMMUNITY_CARDS} community cards allowed, got {len(cards)}")
        return cards
