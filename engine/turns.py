from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence, Set, Union

from .cards import Card
from .errors import IllegalArgumentError, IllegalStateError
from .models import Action, Phase, Player, RoundSummary, TableConfig
from .table import ReadOnlyTable, Table

# Street -> number of community cards showing once it has been dealt.
BOARD_SIZE = {Phase.FLOP: 3, Phase.TURN: 4, Phase.RIVER: 5}


class TurnController:
    """Wraps a Table and decides whose turn it is and when streets advance.

    The controller owns only per-hand bookkeeping (phase, turn pointer, who has
    acted this street, whether the big blind has used its option). Chips and
    cards stay on the wrapped table.
    """

    def __init__(self, table: Table, config: Optional[TableConfig] = None) -> None:
        self.table = table
        self.config = config or TableConfig()
        self.phase = Phase.PREFLOP
        self.next_to_act_index = 0
        self._round_active = False
        self._big_blind_acted = False
        self._acted: Set[Player] = set()

    # Table passthrough -----------------------------------------------

    @property
    def players(self) -> List[Player]:
        return self.table.players

    @property
    def num_players(self) -> int:
        return self.table.num_players

    @property
    def active_players(self) -> List[Player]:
        return self.table.active_players

    @property
    def pot(self) -> Dict[Player, int]:
        return self.table.pot

    @property
    def round_bets(self) -> Dict[Player, int]:
        return self.table.round_bets

    @property
    def dealer_index(self) -> int:
        return self.table.dealer_index

    @property
    def hole_cards(self) -> Dict[Player, List[Card]]:
        return self.table.hole_cards

    @property
    def community_cards(self) -> List[Card]:
        return self.table.community_cards

    @property
    def current_bet(self) -> int:
        return self.table.current_bet

    def pot_total(self) -> int:
        return self.table.pot_total()

    def hole_cards_for(self, player: Player) -> List[Card]:
        return self.table.hole_cards_for(player)

    def read_only_view(self) -> ReadOnlyTable:
        return ReadOnlyTable(self.table, phase=lambda: self.phase)

    def add_player(self, player: Player) -> None:
        if self._round_active:
            raise IllegalStateError("Cannot add a player in the middle of a hand")
        self.table.add_player(player)

    def add_players(self, players: Sequence[Player]) -> None:
        for player in players:
            self.add_player(player)

    def remove_player(self, player: Player) -> None:
        if self._round_active:
            raise IllegalStateError("Cannot remove a player in the middle of a hand")
        self.table.remove_player(player)

    # Hand lifecycle --------------------------------------------------

    def is_round_active(self) -> bool:
        return self._round_active

    def next_to_act(self) -> Player:
        if not self.table.players:
            raise IllegalStateError("No players seated")
        return self.table.players[self.next_to_act_index]

    def start_new_hand(self) -> None:
        self.start_new_hand_with_seed()

    def start_new_hand_with_seed(
        self,
        fixed_hole_cards: Optional[Mapping[Player, Sequence[Card]]] = None,
        community_cards: Sequence[Card] = (),
    ) -> None:
        if self._round_active:
            raise IllegalStateError("A hand is already in progress")
        if self.num_players < 2:
            raise IllegalStateError("The game requires at least 2 players.")
        self._check_blinds_affordable()

        self.table.start_new_hand_with_seed(fixed_hole_cards, community_cards, cards_per_player=2)

        self._round_active = True
        self.phase = Phase.PREFLOP
        self._acted = set()
        self._big_blind_acted = False
        self.next_to_act_index = (self.dealer_index + 1) % self.num_players

        self._post_blinds()

    def _small_blind_player(self) -> Player:
        return self.players[(self.dealer_index + 1) % self.num_players]

    def _big_blind_player(self) -> Player:
        return self.players[(self.dealer_index + 2) % self.num_players]

    def _check_blinds_affordable(self) -> None:
        self.config.validate()
        small, big = self._small_blind_player(), self._big_blind_player()
        if small.bankroll < self.config.small_blind:
            raise IllegalArgumentError(f"Player {small.player_id} cannot cover the small blind")
        if big.bankroll < self.config.big_blind:
            raise IllegalArgumentError(f"Player {big.player_id} cannot cover the big blind")

    def _post_blinds(self) -> None:
        # Blinds go through the normal action path as forced raises, so the
        # turn pointer lands on the seat after the big blind.
        small_blind = self.config.small_blind
        big_blind = self.config.big_blind
        self.player_action(self._small_blind_player(), Action.RAISE, small_blind)
        self.player_action(self._big_blind_player(), Action.RAISE, big_blind - small_blind)
        self._big_blind_acted = False
        self._acted.clear()

    # Action handling -------------------------------------------------

    def player_action(self, player: Player, action: Union[Action, str], amount: int = 0) -> None:
        if not self._round_active:
            raise IllegalStateError("Round is not active. Please start a new hand.")
        try:
            action = Action(action)
        except ValueError:
            raise IllegalArgumentError(f"Unsupported action {action}") from None
        if self.is_betting_round_complete():
            raise IllegalStateError(f"Betting round has concluded. Can't {action.value}")

        current = self.next_to_act()
        if current != player:
            raise IllegalStateError(
                f"[{self.next_to_act_index}] It's Player {current.player_id}'s turn, not Player {player.player_id}'s."
            )

        if action == Action.FOLD:
            self.table.fold(player)
        elif action == Action.CHECK:
            self.table.check(player)
        elif action == Action.CALL:
            self.table.call(player)
        elif action == Action.RAISE:
            self.table.raise_bet(player, amount)

        self._acted.add(player)
        if self.phase == Phase.PREFLOP and player == self._big_blind_player():
            self._big_blind_acted = True

        self._move_to_next_player()

    def is_betting_round_complete(self) -> bool:
        if self.phase == Phase.PREFLOP and not self._big_blind_option_closed():
            return False

        highest = max(self.table.round_bets.values(), default=0)
        able = [player for player in self.active_players if player.bankroll > 0]
        # Nobody left to bet against: the street needs no action.
        if len(able) <= 1 and all(self.table.round_bet(player) >= highest for player in able):
            return True

        return all(
            player.bankroll <= 0 or (player in self._acted and self.table.round_bet(player) == highest)
            for player in self.active_players
        )

    def _big_blind_option_closed(self) -> bool:
        big_blind = self._big_blind_player()
        return self._big_blind_acted or big_blind not in self.active_players or big_blind.bankroll <= 0

    def _move_to_next_player(self) -> None:
        if len(self.active_players) == 1:
            # Everyone else folded; the hand ends without dealing more streets.
            self._round_active = False
            return

        if not self.is_betting_round_complete():
            self._advance_pointer()
            return

        # Keep dealing while nobody is able to bet on the new street.
        while self.is_betting_round_complete():
            if self.phase == Phase.PREFLOP:
                self.deal_flop()
            elif self.phase == Phase.FLOP:
                self.deal_turn()
            elif self.phase == Phase.TURN:
                self.deal_river()
            else:
                self.phase = Phase.SHOWDOWN
                self._round_active = False
                return

    def _advance_pointer(self) -> None:
        count = self.num_players
        for step in range(1, count + 1):
            idx = (self.next_to_act_index + step) % count
            player = self.players[idx]
            if player in self.active_players and player.bankroll > 0:
                self.next_to_act_index = idx
                return

    # Streets ---------------------------------------------------------

    def deal_flop(self) -> List[Card]:
        return self._deal_street(Phase.PREFLOP, Phase.FLOP)

    def deal_turn(self) -> List[Card]:
        return self._deal_street(Phase.FLOP, Phase.TURN)

    def deal_river(self) -> List[Card]:
        return self._deal_street(Phase.TURN, Phase.RIVER)

    def _deal_street(self, expected: Phase, street: Phase) -> List[Card]:
        if not self._round_active:
            raise IllegalStateError("Round is not active. Please start a new hand.")
        if self.phase != expected:
            raise IllegalStateError(
                f"{street.value.title()} can only be dealt after the {expected.value.lower()} phase. Currently {self.phase.value}."
            )
        if not self.is_betting_round_complete():
            raise IllegalStateError(f"Cannot deal the {street.value.lower()}: betting round is still in progress")

        # Seeded boards may already show some of this street's cards.
        missing = BOARD_SIZE[street] - len(self.community_cards)
        if missing > 0:
            self.table.burn_cards(1)
            cards = self.table.deal_community_cards(missing)
        else:
            self.table.start_betting_round()
            cards = []

        self.phase = street
        self._acted = set()
        self.next_to_act_index = self.dealer_index
        self._advance_pointer()
        return cards

    def conclude_round(self) -> RoundSummary:
        if self._round_active:
            raise IllegalStateError("Cannot conclude a hand while betting is still in progress")
        summary = self.table.conclude_round()
        self.phase = Phase.PREFLOP
        self._big_blind_acted = False
        self._acted = set()
        return summary
