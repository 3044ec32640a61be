"""Hold'em table engine: cards, hand ranking, the betting table and turn order."""

from .cards import Card, Deck, RANKS, SUITS, deal, parse_card_text, parse_cards, parse_label
from .errors import IllegalArgumentError, IllegalStateError
from .evaluator import HandCategory, HandValue, compare_hands, describe_rank, rank_hand
from .models import Action, Phase, Player, RoundSummary, TableConfig
from .table import ReadOnlyTable, Table
from .turns import TurnController

__all__ = [
    "Card",
    "Deck",
    "RANKS",
    "SUITS",
    "deal",
    "parse_card_text",
    "parse_cards",
    "parse_label",
    "IllegalArgumentError",
    "IllegalStateError",
    "HandCategory",
    "HandValue",
    "compare_hands",
    "describe_rank",
    "rank_hand",
    "Action",
    "Phase",
    "Player",
    "RoundSummary",
    "TableConfig",
    "ReadOnlyTable",
    "Table",
    "TurnController",
]
