from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

RANKS = "AKQJT98765432"
SUITS = "shcd"
RANK_VALUE = {rank: idx for idx, rank in enumerate(RANKS[::-1], start=2)}
SUIT_SYMBOLS = {"s": "♠", "h": "♥", "c": "♣", "d": "♦"}


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def value(self) -> int:
        """Ordinal of the rank, 2 for a deuce up to 14 for an ace."""
        return RANK_VALUE[self.rank]

    @property
    def label(self) -> str:
        return f"{self.rank}{self.suit}"

    def __str__(self) -> str:
        return f"{self.rank}{SUIT_SYMBOLS[self.suit]}"


def standard_cards() -> List[Card]:
    return [Card(rank, suit) for suit in SUITS for rank in RANKS[::-1]]


class Deck:
    """Ordered stack of cards; index 0 is the top, i.e. the next card dealt."""

    def __init__(self, cards: Optional[Iterable[Card]] = None, rng: Optional[random.Random] = None) -> None:
        self._cards: List[Card] = list(standard_cards() if cards is None else cards)
        self._rng = rng or random.Random()

    @classmethod
    def standard(cls, rng: Optional[random.Random] = None, shuffle: bool = True) -> "Deck":
        deck = cls(rng=rng)
        if shuffle:
            deck.shuffle()
        return deck

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card: object) -> bool:
        return card in self._cards

    @property
    def cards(self) -> List[Card]:
        return list(self._cards)

    def shuffle(self) -> None:
        self._rng.shuffle(self._cards)

    def deal(self, count: int = 1) -> List[Card]:
        return deal(self._cards, count)

    def deal_card(self) -> Card:
        return self.deal(1)[0]

    def add_to_top(self, card: Card) -> None:
        if card in self._cards:
            raise ValueError(f"Card already in deck: {card.label}")
        self._cards.insert(0, card)

    def add_to_bottom(self, card: Card) -> None:
        if card in self._cards:
            raise ValueError(f"Card already in deck: {card.label}")
        self._cards.append(card)

    def remove(self, card: Card) -> bool:
        """Take ``card`` out of the deck; returns False when it was not present."""
        try:
            self._cards.remove(card)
        except ValueError:
            return False
        return True

    def __repr__(self) -> str:
        return f"Deck({' '.join(cards_to_labels(self._cards))})"


def deal(cards: List[Card], count: int) -> List[Card]:
    if count < 0:
        raise ValueError("Cannot deal a negative number of cards")
    if len(cards) < count:
        raise ValueError("Not enough cards left in deck")
    dealt = cards[:count]
    del cards[:count]
    return dealt


def cards_to_labels(cards: Iterable[Card]) -> List[str]:
    return [card.label for card in cards]


def parse_label(label: str) -> Card:
    text = label.strip()
    if len(text) != 2:
        raise ValueError(f"Invalid card label: {label}")
    return Card(text[0].upper(), text[1].lower())


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]


def parse_card_text(text: str) -> List[Card]:
    """Parse whitespace or comma separated labels such as ``"As Kd, 7c"``."""
    return parse_cards(text.replace(",", " ").split())
