"""Strategy backtesting and Monte Carlo equity built on the table engine."""

from .equity import EquityResult, HandEquityCalculator, MonteCarloEquityEvaluator
from .hand_simulator import HandSimulator
from .strategies import (
    STRATEGIES,
    ActionEnvironment,
    AlwaysCall,
    AlwaysCheckOrFold,
    AlwaysFold,
    AlwaysRaise,
    PotOddsStrategy,
    RandomAction,
    Strategy,
    build_strategy,
)
from .strategy_evaluator import StrategyEvaluator, StrategyResults

__all__ = [
    "EquityResult",
    "HandEquityCalculator",
    "MonteCarloEquityEvaluator",
    "HandSimulator",
    "STRATEGIES",
    "ActionEnvironment",
    "AlwaysCall",
    "AlwaysCheckOrFold",
    "AlwaysFold",
    "AlwaysRaise",
    "PotOddsStrategy",
    "RandomAction",
    "Strategy",
    "build_strategy",
    "StrategyEvaluator",
    "StrategyResults",
]
