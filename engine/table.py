from __future__ import annotations

import random
from dataclasses import replace
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .cards import Card, Deck
from .errors import IllegalArgumentError, IllegalStateError
from .evaluator import best_hands
from .models import Phase, Player, RoundSummary

# Table holds the chips and cards of a single hand. Turn order and phase
# transitions live one layer up in TurnController; nothing here knows whose
# turn it is.

MAX_COMMUNITY_CARDS = 5


class Table:
    """Betting-table state machine for no-limit hold'em."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()
        self.players: List[Player] = []
        self.active_players: List[Player] = []
        self.pot: Dict[Player, int] = {}
        self.round_bets: Dict[Player, int] = {}
        self.dealer_index = 0
        self.hole_cards: Dict[Player, List[Card]] = {}
        self.community_cards: List[Card] = []
        self.burned_cards: List[Card] = []
        self.current_bet = 0
        self.deck = Deck.standard(self.rng, shuffle=False)

    # Seat management -------------------------------------------------

    @property
    def num_players(self) -> int:
        return len(self.players)

    def hand_in_progress(self) -> bool:
        return bool(self.hole_cards)

    def add_player(self, player: Player) -> None:
        if self.hand_in_progress():
            raise IllegalStateError("Cannot add a player in the middle of a hand")
        if player not in self.players:
            self.players.append(player)

    def add_players(self, players: Iterable[Player]) -> None:
        for player in players:
            self.add_player(player)

    def remove_player(self, player: Player) -> None:
        if self.hand_in_progress():
            raise IllegalStateError("Cannot remove a player in the middle of a hand")
        if player in self.players:
            seat = self.players.index(player)
            self.players.remove(player)
            # Seats before the button shift left; keep the button on the same player.
            if seat < self.dealer_index:
                self.dealer_index -= 1
        self.dealer_index = self.dealer_index % len(self.players) if self.players else 0

    def remove_players(self, players: Iterable[Player]) -> None:
        for player in list(players):
            self.remove_player(player)

    def advance_dealer_position(self) -> None:
        if self.players:
            self.dealer_index = (self.dealer_index + 1) % len(self.players)

    # Hand lifecycle --------------------------------------------------

    def start_new_hand_with_seed(
        self,
        fixed_hole_cards: Optional[Mapping[Player, Sequence[Card]]] = None,
        community_cards: Sequence[Card] = (),
        cards_per_player: int = 2,
    ) -> None:
        """Start a hand, optionally pinning some hole cards and board cards.

        Pinned cards are pulled out of the fresh deck so they cannot be dealt a
        second time. Everyone else is dealt round-robin starting one seat after
        the dealer until each player holds ``cards_per_player`` cards.
        """
        fixed = dict(fixed_hole_cards or {})
        if self.num_players < 2:
            raise IllegalStateError("The game requires at least 2 players.")
        self._validate_seed(fixed, community_cards, cards_per_player)

        deck = Deck.standard(self.rng)
        for card in [card for cards in fixed.values() for card in cards] + list(community_cards):
            deck.remove(card)

        self.deck = deck
        self.hole_cards = {player: list(fixed.get(player, ())) for player in self.players}
        self.active_players = list(self.players)
        self.community_cards = list(community_cards)
        self.burned_cards = []
        self.pot = {player: 0 for player in self.players}
        self.round_bets = {}
        self.current_bet = 0

        for _ in range(cards_per_player):
            for player in self._seats_from(self.dealer_index + 1):
                held = self.hole_cards[player]
                if len(held) < cards_per_player:
                    held.append(self.deck.deal_card())

    def _validate_seed(
        self,
        fixed: Mapping[Player, Sequence[Card]],
        community_cards: Sequence[Card],
        cards_per_player: int,
    ) -> None:
        if cards_per_player < 0:
            raise IllegalArgumentError("Cards per player cannot be negative")
        if len(community_cards) > MAX_COMMUNITY_CARDS:
            raise IllegalArgumentError(f"At most {MAX_COMMUNITY_CARDS} community cards allowed")
        seeded: List[Card] = list(community_cards)
        for player, cards in fixed.items():
            if player not in self.players:
                raise IllegalArgumentError(f"Player {player.player_id} is not seated at the table")
            if len(cards) > cards_per_player:
                raise IllegalArgumentError(f"Player {player.player_id} was given too many hole cards")
            seeded.extend(cards)
        if len(set(seeded)) != len(seeded):
            raise IllegalArgumentError("Seeded cards contain duplicates")

    def _seats_from(self, start: int) -> List[Player]:
        count = self.num_players
        return [self.players[(start + offset) % count] for offset in range(count)]

    def hole_cards_for(self, player: Player) -> List[Card]:
        if player not in self.hole_cards:
            raise IllegalArgumentError(f"Missing player {player.player_id}")
        return list(self.hole_cards[player])

    def deal_community_cards(self, amount: int) -> List[Card]:
        self._require_hand()
        if amount <= 0:
            raise IllegalArgumentError("Must deal at least one community card")
        if len(self.community_cards) + amount > MAX_COMMUNITY_CARDS:
            raise IllegalStateError(
                f"Board already shows {len(self.community_cards)} cards; cannot deal {amount} more"
            )
        cards = self.deck.deal(amount)
        self.community_cards.extend(cards)
        self.start_betting_round()
        return cards

    def burn_cards(self, amount: int = 1) -> None:
        self._require_hand()
        self.burned_cards.extend(self.deck.deal(amount))

    def start_betting_round(self) -> None:
        self.current_bet = 0
        self.round_bets.clear()

    def _require_hand(self) -> None:
        if not self.hand_in_progress():
            raise IllegalStateError("No hand in progress. Please start a new hand.")

    def _require_active(self, player: Player) -> None:
        self._require_hand()
        if player not in self.active_players:
            raise IllegalStateError(f"Player {player.player_id} is not in the game.")

    # Betting primitives ----------------------------------------------

    def round_bet(self, player: Player) -> int:
        return self.round_bets.get(player, 0)

    def amount_to_call(self, player: Player) -> int:
        return max(self.current_bet - self.round_bet(player), 0)

    def fold(self, player: Player) -> None:
        self._require_active(player)
        if len(self.active_players) == 1:
            raise IllegalStateError(f"Player {player.player_id} is the last active player and cannot fold.")
        self.active_players.remove(player)

    def call(self, player: Player) -> None:
        self._require_active(player)
        owed = self.current_bet - self.round_bet(player)
        if owed <= 0:
            raise IllegalStateError(f"Player {player.player_id} has already matched the current bet.")
        if owed > player.bankroll:
            raise IllegalArgumentError(f"Insufficient funds! {owed} > {player.bankroll}")
        self._commit_chips(player, owed)

    def raise_bet(self, player: Player, amount: int) -> None:
        self._require_active(player)
        if amount <= 0:
            raise IllegalArgumentError("Raise amount must be positive.")
        new_bet = self.current_bet + amount
        delta = new_bet - self.round_bet(player)
        if delta <= 0:
            raise IllegalArgumentError("Raise amount must exceed the player's current bet in this round.")
        if delta > player.bankroll:
            raise IllegalArgumentError(f"Insufficient funds! {delta} > {player.bankroll}")
        self._commit_chips(player, delta)
        self.current_bet = new_bet

    def check(self, player: Player) -> None:
        self._require_active(player)
        if self.round_bet(player) != self.current_bet:
            raise IllegalStateError(
                f"Player {player.player_id} cannot check without matching the current bet of {self.current_bet}."
            )
        self.round_bets[player] = self.round_bet(player)

    def _commit_chips(self, player: Player, amount: int) -> None:
        player.debit(amount)
        self.round_bets[player] = self.round_bet(player) + amount
        self.pot[player] = self.pot.get(player, 0) + amount

    def pot_total(self) -> int:
        return sum(self.pot.values())

    # Showdown --------------------------------------------------------

    def compute_winners(self) -> List[Player]:
        if len(self.active_players) == 1:
            return list(self.active_players)
        if len(self.community_cards) != MAX_COMMUNITY_CARDS:
            raise IllegalStateError(
                f"Exactly 5 community cards must be shown. There are {len(self.community_cards)} currently shown."
            )
        hands = {player: self.hole_cards[player] + self.community_cards for player in self.active_players}
        return best_hands(hands)  # type: ignore[return-value]

    def conclude_round(self) -> RoundSummary:
        """Pay the pot to the winners, rotate the dealer and clear the hand."""
        self._require_hand()
        winners = self.compute_winners()
        total = self.pot_total()

        share, remainder = divmod(total, len(winners))
        payouts: Dict[Player, int] = {}
        for idx, winner in enumerate(self._in_payout_order(winners)):
            payouts[winner] = share + (1 if idx < remainder else 0)
            winner.credit(payouts[winner])

        summary = RoundSummary(
            community_cards=tuple(self.community_cards),
            hole_cards=MappingProxyType({player: tuple(cards) for player, cards in self.hole_cards.items()}),
            folded_players=frozenset(player for player in self.players if player not in self.active_players),
            player_bets=MappingProxyType({player: self.pot.get(player, 0) for player in self.players}),
            total_pot_size=total,
            winners=frozenset(winners),
            payouts=MappingProxyType(payouts),
        )
        self.advance_dealer_position()
        self.reset()
        return summary

    def _in_payout_order(self, winners: List[Player]) -> List[Player]:
        # Odd chips go to the winners closest to the dealer's left.
        return [player for player in self._seats_from(self.dealer_index + 1) if player in winners]

    def reset(self) -> None:
        self.current_bet = 0
        self.hole_cards.clear()
        self.pot.clear()
        self.round_bets.clear()
        self.community_cards.clear()
        self.burned_cards.clear()
        self.active_players = []


def _rejects(operation: str) -> Callable[..., None]:
    def rejected(self: "ReadOnlyTable", *args: object, **kwargs: object) -> None:
        raise IllegalStateError(f"Cannot {operation}: this is a read only view of the poker table")

    rejected.__name__ = operation
    return rejected


class ReadOnlyTable:
    """Observable table state handed to strategies. Every mutation is refused.

    Players come back as copies, so debiting one leaves the seated bankroll alone.
    """

    def __init__(self, table: Table, phase: Optional[Callable[[], Phase]] = None) -> None:
        self._table = table
        self._phase = phase

    @property
    def players(self) -> Tuple[Player, ...]:
        return tuple(replace(player) for player in self._table.players)

    @property
    def num_players(self) -> int:
        return self._table.num_players

    @property
    def active_players(self) -> Tuple[Player, ...]:
        return tuple(replace(player) for player in self._table.active_players)

    @property
    def pot(self) -> Mapping[Player, int]:
        return MappingProxyType(dict(self._table.pot))

    @property
    def round_bets(self) -> Mapping[Player, int]:
        return MappingProxyType(dict(self._table.round_bets))

    @property
    def dealer_index(self) -> int:
        return self._table.dealer_index

    @property
    def hole_cards(self) -> Mapping[Player, Tuple[Card, ...]]:
        return MappingProxyType({player: tuple(cards) for player, cards in self._table.hole_cards.items()})

    @property
    def community_cards(self) -> Tuple[Card, ...]:
        return tuple(self._table.community_cards)

    @property
    def current_bet(self) -> int:
        return self._table.current_bet

    @property
    def phase(self) -> Optional[Phase]:
        return self._phase() if self._phase else None

    def pot_total(self) -> int:
        return self._table.pot_total()

    def hole_cards_for(self, player: Player) -> List[Card]:
        return self._table.hole_cards_for(player)

    def amount_to_call(self, player: Player) -> int:
        return self._table.amount_to_call(player)

    add_player = _rejects("add_player")
    add_players = _rejects("add_players")
    remove_player = _rejects("remove_player")
    remove_players = _rejects("remove_players")
    start_new_hand_with_seed = _rejects("start_new_hand_with_seed")
    deal_community_cards = _rejects("deal_community_cards")
    burn_cards = _rejects("burn_cards")
    start_betting_round = _rejects("start_betting_round")
    fold = _rejects("fold")
    call = _rejects("call")
    raise_bet = _rejects("raise_bet")
    check = _rejects("check")
    advance_dealer_position = _rejects("advance_dealer_position")
    conclude_round = _rejects("conclude_round")
