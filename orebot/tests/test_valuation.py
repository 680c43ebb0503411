import math

from orebot.strategy.valuation import NO_ACTION, REJECTED, evaluate


def test_rejects_empty_slot_and_empty_board() -> None:
    assert evaluate(0.0, 10.0, 1.0) == REJECTED
    assert evaluate(1.0, 0.0, 1.0) == REJECTED
    assert evaluate(-1.0, 10.0, 1.0).ev == -math.inf


def test_rejects_non_finite_inputs() -> None:
    assert evaluate(math.nan, 10.0, 1.0) == REJECTED
    assert evaluate(1.0, math.inf, 1.0) == REJECTED
    assert evaluate(1.0, 10.0, math.nan) == REJECTED


def test_rejects_non_positive_pool() -> None:
    # Whole board sits in this slot and there is no reward to split.
    assert evaluate(5.0, 5.0, 0.0) == REJECTED


def test_crowded_slot_recommends_nothing() -> None:
    v = evaluate(1.0, 22.3, 0.45)
    assert v == NO_ACTION
    assert v.ev == 0.0


def test_thin_slot_has_positive_stake_and_ev() -> None:
    v = evaluate(0.1, 24.1, 0.45)
    assert 0.19 < v.y < 0.21
    assert v.ev > 0


def test_zero_stake_always_means_zero_ev() -> None:
    for others in (0.01, 0.1, 0.5, 1.0, 3.0):
        for total in (1.0, 5.0, 25.0, 100.0):
            if total < others:
                continue
            for reward in (0.0, 0.1, 0.45, 2.0):
                v = evaluate(others, total, reward)
                if v == REJECTED:
                    continue
                assert v.y >= 0
                if v.y == 0:
                    assert v.ev == 0.0
