import pytest

from engine.errors import IllegalArgumentError, IllegalStateError
from simulation.equity import EquityResult, HandEquityCalculator, MonteCarloEquityEvaluator

from .helpers import cards


def test_single_player_has_full_equity():
    evaluator = MonteCarloEquityEvaluator(num_simulations=10)
    assert evaluator.evaluate(1, cards("7c 2d"), []) == 1.0


def test_pocket_aces_heads_up_close_to_reference():
    evaluator = MonteCarloEquityEvaluator(num_simulations=2_000, seed=11)
    equity = evaluator.evaluate(2, cards("As Ac"), [])
    assert equity == pytest.approx(0.85, abs=0.04)


def test_board_plays_for_everyone_splits_evenly():
    board = cards("As Ks Qs Js Ts")
    result = MonteCarloEquityEvaluator(num_simulations=50, seed=3).run(3, cards("2c 3d"), board)

    assert result.ties == 50
    assert result.wins == result.losses == 0
    assert result.equity == pytest.approx(1 / 3)


def test_unbeatable_hand_always_wins():
    result = MonteCarloEquityEvaluator(num_simulations=100, seed=5).run(4, cards("Ah Ad"), cards("Ac As Kd 7c 2h"))
    assert result.wins == 100
    assert result.equity == 1.0


def test_same_seed_reproduces_result():
    first = MonteCarloEquityEvaluator(num_simulations=300, seed=21).run(3, cards("Kh Qh"), cards("Jh 2c"))
    second = MonteCarloEquityEvaluator(num_simulations=300, seed=21).run(3, cards("Kh Qh"), cards("Jh 2c"))
    assert first == second
    assert first.wins + first.ties + first.losses == 300


def test_progress_listener_sees_every_simulation():
    seen = []
    MonteCarloEquityEvaluator(num_simulations=25, seed=1).evaluate(
        2, cards("9s 9d"), [], progress_listener=lambda done, total: seen.append((done, total))
    )
    assert seen == [(idx, 25) for idx in range(1, 26)]


def test_parallel_workers_merge_chunks():
    seen = []
    evaluator = MonteCarloEquityEvaluator(num_simulations=101, seed=8, workers=2)
    result = evaluator.run(2, cards("Ah Kh"), [], progress_listener=lambda done, total: seen.append(done))

    assert result.simulations == 101
    assert result.wins + result.ties + result.losses == 101
    assert seen[-1] == 101
    assert len(seen) == 2
    assert evaluator.run(2, cards("Ah Kh"), []) == result


@pytest.mark.parametrize(
    "players, hole, board, message",
    [
        (0, "As Ac", "", "At least one player"),
        (2, "As Ac Kd", "", "At most 2 hole cards"),
        (2, "As Ac", "2c 3c 4c 5c 6c 7c", "At most 5 community cards"),
        (2, "As Ac", "As 3c 4c", "duplicates"),
        (24, "As Ac", "", "Not enough cards"),
    ],
)
def test_invalid_requests_rejected(players, hole, board, message):
    evaluator = MonteCarloEquityEvaluator(num_simulations=10)
    with pytest.raises(IllegalArgumentError, match=message):
        evaluator.evaluate(players, cards(hole), cards(board))


def test_evaluator_settings_validated():
    with pytest.raises(IllegalArgumentError):
        MonteCarloEquityEvaluator(num_simulations=0)
    with pytest.raises(IllegalArgumentError):
        MonteCarloEquityEvaluator(workers=0)


def test_empty_result_has_zero_equity():
    assert EquityResult().equity == 0.0


def test_calculator_requires_hole_cards():
    calculator = HandEquityCalculator(MonteCarloEquityEvaluator(num_simulations=10, seed=1))
    with pytest.raises(IllegalStateError, match="hole cards"):
        calculator.compute_current_equity()


def test_calculator_session_state():
    calculator = HandEquityCalculator(MonteCarloEquityEvaluator(num_simulations=40, seed=2))
    calculator.set_hole_cards("As Ac")
    calculator.set_community_cards("Kd 7c")
    calculator.add_community_cards("2h")
    calculator.add_community_cards("   ")
    calculator.set_num_opponents(2)

    assert calculator.community_cards == cards("Kd 7c 2h")
    assert 0.0 <= calculator.compute_current_equity() <= 1.0

    with pytest.raises(IllegalArgumentError, match="At most 5 community cards"):
        calculator.add_community_cards("3h 4h 5h")
    assert calculator.community_cards == cards("Kd 7c 2h")

    calculator.reset()
    assert calculator.hole_cards == []
    assert calculator.community_cards == []
    assert calculator.num_opponents == 1


def test_calculator_rejects_negative_opponents():
    calculator = HandEquityCalculator()
    with pytest.raises(IllegalArgumentError):
        calculator.set_num_opponents(-1)
