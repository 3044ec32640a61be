from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Sequence, Tuple

from .cards import Card


class HandCategory(IntEnum):
    HIGH_CARD = 1
    PAIR = 2
    TWO_PAIR = 3
    THREE_OF_A_KIND = 4
    STRAIGHT = 5
    FLUSH = 6
    FULL_HOUSE = 7
    FOUR_OF_A_KIND = 8
    STRAIGHT_FLUSH = 9
    ROYAL_FLUSH = 10


@dataclass(frozen=True)
class HandValue:
    category: HandCategory
    tiebreak: Tuple[int, ...]

    def __lt__(self, other: "HandValue") -> bool:
        return compare_values(self, other) < 0

    def __gt__(self, other: "HandValue") -> bool:
        return compare_values(self, other) > 0

    def __le__(self, other: "HandValue") -> bool:
        return compare_values(self, other) <= 0

    def __ge__(self, other: "HandValue") -> bool:
        return compare_values(self, other) >= 0


def rank_hand(cards: Sequence[Card]) -> HandValue:
    """Rank the best five-card hand available in ``cards`` (five or more cards).

    Categories are tested from the top of the ladder down and the first match
    wins. Straights need five consecutive distinct values, so A-2-3-4-5 does
    not count as a straight.
    """
    if len(cards) < 5:
        raise ValueError(f"At least 5 cards are required, got {len(cards)}")
    if len(set(cards)) != len(cards):
        raise ValueError("Duplicate cards in hand")

    ordered = sorted(cards, key=lambda card: card.value, reverse=True)
    suited = _flush_values(ordered)

    if suited:
        run = _straight_run(suited)
        if run:
            category = HandCategory.ROYAL_FLUSH if run[0] == 14 else HandCategory.STRAIGHT_FLUSH
            return HandValue(category, tuple(run))

    counts = Counter(card.value for card in ordered)
    distinct = sorted(counts, reverse=True)
    quads = [value for value in distinct if counts[value] >= 4]
    trips = [value for value in distinct if counts[value] == 3]
    pairs = [value for value in distinct if counts[value] == 2]

    if quads:
        kicker = max(value for value in distinct if value != quads[0])
        return HandValue(HandCategory.FOUR_OF_A_KIND, (quads[0], kicker))
    if trips and (len(trips) > 1 or pairs):
        pair = max(trips[1:] + pairs)
        return HandValue(HandCategory.FULL_HOUSE, (trips[0], pair))
    if suited:
        return HandValue(HandCategory.FLUSH, tuple(suited[:5]))

    run = _straight_run(distinct)
    if run:
        return HandValue(HandCategory.STRAIGHT, tuple(run))
    if trips:
        kickers = [value for value in distinct if value != trips[0]][:2]
        return HandValue(HandCategory.THREE_OF_A_KIND, (trips[0], *kickers))
    if len(pairs) >= 2:
        high, low = pairs[:2]
        kicker = max(value for value in distinct if value not in (high, low))
        return HandValue(HandCategory.TWO_PAIR, (high, low, kicker))
    if pairs:
        kickers = [value for value in distinct if value != pairs[0]][:3]
        return HandValue(HandCategory.PAIR, (pairs[0], *kickers))
    return HandValue(HandCategory.HIGH_CARD, tuple(distinct[:5]))


def _flush_values(ordered: Sequence[Card]) -> Optional[List[int]]:
    # Values of the majority suit, highest first, when that suit has five cards.
    by_suit: Dict[str, List[int]] = {}
    for card in ordered:
        by_suit.setdefault(card.suit, []).append(card.value)
    best = max(by_suit.values(), key=len)
    return best if len(best) >= 5 else None


def _straight_run(values: Sequence[int]) -> Optional[List[int]]:
    distinct = sorted(set(values), reverse=True)
    for idx in range(len(distinct) - 4):
        window = distinct[idx : idx + 5]
        if window[0] - window[4] == 4:
            return window
    return None


def compare_values(first: HandValue, second: HandValue) -> int:
    if first.category != second.category:
        return 1 if first.category > second.category else -1
    for mine, theirs in zip(first.tiebreak, second.tiebreak):
        if mine != theirs:
            return 1 if mine > theirs else -1
    return 0


def compare_hands(first: Sequence[Card], second: Sequence[Card]) -> int:
    """Total order over card sets: -1 if ``first`` loses, 0 on a tie, 1 if it wins."""
    return compare_values(rank_hand(first), rank_hand(second))


def best_hands(hands: Dict[object, Sequence[Card]]) -> List[object]:
    """Keys of every hand tied for the best value, in the mapping's order."""
    if not hands:
        return []
    ranked = {key: rank_hand(cards) for key, cards in hands.items()}
    top = max(ranked.values())
    return [key for key, value in ranked.items() if compare_values(value, top) == 0]


def describe_rank(value: HandValue) -> str:
    return value.category.name.lower()
