import random

import pytest

from engine.cards import standard_cards
from engine.errors import IllegalArgumentError, IllegalStateError
from engine.models import Player
from engine.table import ReadOnlyTable, Table

from .helpers import cards, create_table


def test_add_players_ignores_duplicates():
    table, players = create_table(count=3)
    table.add_player(players[0])
    assert table.players == players


def test_cannot_add_or_remove_players_during_hand():
    table, players = create_table()
    table.start_new_hand_with_seed()

    with pytest.raises(IllegalStateError, match="middle of a hand"):
        table.add_player(Player(99))
    with pytest.raises(IllegalStateError, match="middle of a hand"):
        table.remove_player(players[0])


def test_requires_two_players_to_deal():
    table, _ = create_table(count=1)
    with pytest.raises(IllegalStateError, match="at least 2 players"):
        table.start_new_hand_with_seed()


def test_deals_two_unique_hole_cards_each():
    table, players = create_table()
    table.start_new_hand_with_seed()

    dealt = [card for player in players for card in table.hole_cards_for(player)]
    assert all(len(table.hole_cards_for(player)) == 2 for player in players)
    assert len(set(dealt)) == 8
    assert len(table.deck) == 44
    assert table.pot_total() == 0


def test_seeded_cards_are_removed_from_deck():
    table, players = create_table()
    hero = cards("As Ah")
    board = cards("2c 7d 9h")
    table.start_new_hand_with_seed({players[0]: hero}, board)

    assert table.hole_cards_for(players[0]) == hero
    assert table.community_cards == board
    assert len(table.deck) == 52 - 8 - 3
    assert all(card not in table.deck for card in hero + board)
    others = [card for player in players[1:] for card in table.hole_cards_for(player)]
    assert not set(others) & set(hero + board)


def test_duplicate_seeded_cards_rejected():
    table, players = create_table()
    with pytest.raises(IllegalArgumentError, match="duplicates"):
        table.start_new_hand_with_seed({players[0]: cards("As Ah"), players[1]: cards("As Kd")})
    assert not table.hand_in_progress()


def test_raise_and_call_move_chips_into_pot():
    table, (p1, p2, p3, _) = create_table()
    table.start_new_hand_with_seed()

    table.raise_bet(p1, 20)
    table.call(p2)

    assert table.current_bet == 20
    assert p1.bankroll == 980
    assert p2.bankroll == 980
    assert table.pot_total() == 40
    assert table.amount_to_call(p3) == 20

    table.raise_bet(p3, 30)
    assert table.current_bet == 50
    assert table.round_bet(p3) == 50


def test_check_requires_matching_current_bet():
    table, (p1, p2, _, _) = create_table()
    table.start_new_hand_with_seed()
    table.raise_bet(p1, 20)

    with pytest.raises(IllegalStateError, match="cannot check"):
        table.check(p2)


def test_call_with_nothing_to_call_rejected():
    table, (p1, _, _, _) = create_table()
    table.start_new_hand_with_seed()
    with pytest.raises(IllegalStateError, match="already matched"):
        table.call(p1)


def test_call_without_bankroll_leaves_state_untouched():
    table = Table()
    rich, poor = Player(1, 100), Player(2, 10)
    table.add_players([rich, poor])
    table.start_new_hand_with_seed()
    table.raise_bet(rich, 20)

    with pytest.raises(IllegalArgumentError, match="Insufficient funds"):
        table.call(poor)
    assert poor.bankroll == 10
    assert table.round_bet(poor) == 0
    assert table.pot_total() == 20


@pytest.mark.parametrize("amount", [0, -5])
def test_non_positive_raise_rejected(amount):
    table, (p1, _, _, _) = create_table()
    table.start_new_hand_with_seed()
    with pytest.raises(IllegalArgumentError, match="must be positive"):
        table.raise_bet(p1, amount)


def test_raise_beyond_bankroll_rejected():
    table, (p1, _, _, _) = create_table(bankroll=50)
    table.start_new_hand_with_seed()
    with pytest.raises(IllegalArgumentError, match="Insufficient funds"):
        table.raise_bet(p1, 51)
    assert p1.bankroll == 50


def test_folded_player_cannot_act():
    table, (p1, p2, _, _) = create_table()
    table.start_new_hand_with_seed()
    table.fold(p1)

    assert p1 not in table.active_players
    with pytest.raises(IllegalStateError, match="not in the game"):
        table.fold(p1)
    with pytest.raises(IllegalStateError, match="not in the game"):
        table.raise_bet(p1, 10)


def test_community_cards_start_new_betting_round():
    table, (p1, _, _, _) = create_table()
    table.start_new_hand_with_seed()
    table.raise_bet(p1, 20)

    table.burn_cards(1)
    flop = table.deal_community_cards(3)

    assert len(flop) == 3
    assert table.current_bet == 0
    assert table.round_bets == {}
    assert table.pot_total() == 20
    assert len(table.burned_cards) == 1


def test_board_never_exceeds_five_cards():
    table, _ = create_table()
    table.start_new_hand_with_seed(community_cards=cards("2c 3c 4c 5d"))
    table.deal_community_cards(1)
    with pytest.raises(IllegalStateError, match="cannot deal"):
        table.deal_community_cards(1)


def test_last_player_standing_wins_without_showdown():
    table, (p1, p2, p3, p4) = create_table()
    table.start_new_hand_with_seed()
    table.raise_bet(p1, 40)
    for player in (p2, p3, p4):
        table.fold(player)

    summary = table.conclude_round()

    assert summary.winners == {p1}
    assert summary.total_pot_size == 40
    assert summary.folded_players == {p2, p3, p4}
    assert summary.community_cards == ()
    assert p1.bankroll == 1_000
    assert table.dealer_index == 1
    assert not table.hand_in_progress()
    assert table.pot_total() == 0


def test_showdown_pays_best_hand():
    table, (p1, p2) = create_table(count=2)
    table.start_new_hand_with_seed(
        {p1: cards("As Ah"), p2: cards("Kd Kc")},
        cards("2c 7d 9h Js 3s"),
    )
    table.raise_bet(p1, 100)
    table.call(p2)

    summary = table.conclude_round()

    assert summary.winners == {p1}
    assert summary.payouts == {p1: 200}
    assert summary.net_result(p1) == 100
    assert summary.net_result(p2) == -100
    assert p1.bankroll == 1_100
    assert p2.bankroll == 900
    assert summary.hole_cards[p2] == tuple(cards("Kd Kc"))


def test_showdown_requires_full_board():
    table, _ = create_table()
    table.start_new_hand_with_seed()
    with pytest.raises(IllegalStateError, match="Exactly 5 community cards"):
        table.conclude_round()


def test_split_pot_remainder_goes_left_of_dealer():
    table, (p1, p2, p3) = create_table(count=3, bankroll=100)
    table.start_new_hand_with_seed(
        {p1: cards("Ah Kd"), p2: cards("As Kc"), p3: cards("2d 3c")},
        cards("Qh Jd 9s 8c 4h"),
    )
    table.raise_bet(p1, 3)
    table.call(p2)
    table.call(p3)

    summary = table.conclude_round()

    assert summary.winners == {p1, p2}
    assert summary.payouts == {p2: 5, p1: 4}
    assert sum(summary.payouts.values()) == summary.total_pot_size == 9
    assert (p1.bankroll, p2.bankroll, p3.bankroll) == (101, 102, 97)


def test_remove_player_keeps_dealer_in_range():
    table, players = create_table(count=3)
    table.dealer_index = 2
    table.remove_player(players[2])
    assert table.dealer_index == 0
    assert table.num_players == 2


def test_read_only_view_reflects_state_and_rejects_mutation():
    table, (p1, p2, _, _) = create_table()
    view = ReadOnlyTable(table)
    table.start_new_hand_with_seed()
    table.raise_bet(p1, 20)

    assert view.current_bet == 20
    assert view.pot_total() == 20
    assert view.amount_to_call(p2) == 20
    assert view.players == tuple(table.players)
    assert view.phase is None

    for attempt in (
        lambda: view.fold(p2),
        lambda: view.call(p2),
        lambda: view.raise_bet(p2, 10),
        lambda: view.check(p2),
        lambda: view.add_player(Player(99)),
        lambda: view.deal_community_cards(3),
        lambda: view.conclude_round(),
    ):
        with pytest.raises(IllegalStateError, match="read only view"):
            attempt()
    assert table.current_bet == 20


def test_removing_seat_before_button_keeps_dealer():
    table, (p1, p2, p3, p4) = create_table()
    table.dealer_index = 2
    table.remove_player(p1)
    assert table.players[table.dealer_index] == p3


def test_read_only_view_hands_out_player_copies():
    table, (p1, _, _, _) = create_table()
    view = ReadOnlyTable(table)
    table.start_new_hand_with_seed()

    view.players[0].debit(100)
    view.active_players[0].debit(100)
    assert p1.bankroll == 1_000
    assert view.players[0] == p1


def test_new_table_deck_is_not_shuffled_until_a_hand_starts():
    rng = random.Random(5)
    table = Table(rng=rng)
    assert table.deck.cards == standard_cards()
    assert rng.random() == random.Random(5).random()


def test_reset_clears_burned_cards():
    table, _ = create_table()
    table.start_new_hand_with_seed()
    table.burn_cards(1)
    table.reset()
    assert table.burned_cards == []
