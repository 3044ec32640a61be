"""Command line entry point.

Examples:
    python -m simulation equity --hole "As Ac" --opponents 2 --simulations 20000
    python -m simulation equity --hole "Ah Kh" --board "Qh Jh 2c" --workers 4 --seed 7
    python -m simulation strategies --players call,random,potodds --hands 500
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from engine.cards import parse_card_text
from engine.models import Player, TableConfig

from .equity import MonteCarloEquityEvaluator
from .strategies import STRATEGIES, build_strategy
from .strategy_evaluator import StrategyEvaluator

LOGGER = logging.getLogger("simulation")


def _run_equity(args: argparse.Namespace) -> None:
    hole = parse_card_text(args.hole)
    board = parse_card_text(args.board) if args.board else []
    evaluator = MonteCarloEquityEvaluator(num_simulations=args.simulations, seed=args.seed, workers=args.workers)
    result = evaluator.run(1 + args.opponents, hole, board)
    print(f"EQUITY: {result.equity * 100:.2f}%")
    print(f"wins={result.wins} ties={result.ties} losses={result.losses} simulations={result.simulations}")


def _run_strategies(args: argparse.Namespace) -> None:
    names = [name for name in args.players.split(",") if name.strip()]
    if len(names) < 2:
        raise ValueError("At least two strategies are required")
    config = TableConfig(small_blind=args.sb, big_blind=args.bb, starting_bankroll=args.starting_bankroll)
    config.validate()

    players = {Player(idx, config.starting_bankroll): build_strategy(name) for idx, name in enumerate(names)}
    results = StrategyEvaluator(players, num_simulations=args.hands, config=config).evaluate()

    print(f"{'player':<8}{'strategy':<10}{'hands':>7}{'wins':>7}{'draws':>7}{'losses':>8}{'chips':>9}")
    for (player, outcome), name in zip(results.items(), names):
        print(
            f"{player.player_id:<8}{name.strip():<10}{outcome.hands_played:>7}{outcome.wins:>7}"
            f"{outcome.draws:>7}{outcome.losses:>8}{outcome.chip_difference:>+9}"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m simulation", description="Hold'em equity and strategy simulations")
    subparsers = parser.add_subparsers(dest="command", required=True)

    equity = subparsers.add_parser("equity", help="Estimate hand equity by Monte Carlo simulation")
    equity.add_argument("--hole", required=True, help="Hero hole cards, e.g. 'As Ac'")
    equity.add_argument("--board", default="", help="Known community cards, e.g. 'Ad 8d Kd'")
    equity.add_argument("--opponents", type=int, default=1, help="Number of opponents.")
    equity.add_argument("--simulations", type=int, default=100_000, help="Number of simulated deals.")
    equity.add_argument("--workers", type=int, default=1, help="Worker processes to spread deals over.")
    equity.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs.")
    equity.set_defaults(handler=_run_equity)

    strategies = subparsers.add_parser("strategies", help="Backtest strategies against each other")
    strategies.add_argument(
        "--players",
        required=True,
        help=f"Comma separated strategy names, one per seat ({', '.join(sorted(STRATEGIES))})",
    )
    strategies.add_argument("--hands", type=int, default=1_000, help="Number of hands to play.")
    strategies.add_argument("--sb", type=int, default=1, help="Small blind size.")
    strategies.add_argument("--bb", type=int, default=2, help="Big blind size.")
    strategies.add_argument("--starting-bankroll", type=int, default=1_000, help="Starting bankroll per player.")
    strategies.set_defaults(handler=_run_strategies)

    for sub in (equity, strategies):
        sub.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, etc.).")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING), format="%(message)s")
    try:
        args.handler(args)
    except (ValueError, RuntimeError) as exc:
        LOGGER.debug("%s command failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
