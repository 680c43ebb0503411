import math

import pytest

from orebot.domain import EMPTY_ANALYSIS
from orebot.domain.constants import HIT_PROB, REF_MULT
from orebot.strategy.analyzer import analyze, reward_value
from orebot.tests.helpers import make_round, sample_board


def _sample(ore_sol: float = 0.5):
    deployed, counts = sample_board()
    return analyze(make_round(4, deployed_sol=deployed, counts=counts), ore_sol)


def test_no_detail_gives_empty_analysis() -> None:
    assert analyze(None, 1.0) == EMPTY_ANALYSIS
    assert EMPTY_ANALYSIS.best_ev is None
    assert EMPTY_ANALYSIS.best_ratio is None


def test_best_ev_is_thinnest_slot() -> None:
    out = _sample()
    assert out.best_ev is not None
    assert out.best_ev.slot == 7
    assert [s.slot for s in out.by_ev] == [7, 3]
    assert all(s.ev > 0 for s in out.by_ev)
    evs = [s.ev for s in out.by_ev]
    assert evs == sorted(evs, reverse=True)


def test_ratio_ranking_excludes_empty_slots() -> None:
    out = _sample()
    assert out.best_ratio is not None
    assert out.best_ratio.slot == 3
    slots = [s.slot for s in out.by_ratio]
    assert slots[:2] == [3, 7]
    assert 12 not in slots
    assert len(slots) == 24
    # Ties at 0.5 sol/player keep slot order.
    assert slots[2:] == sorted(slots[2:])


def test_empty_slot_is_kept_in_table_but_never_ranked() -> None:
    out = _sample()
    empty = out.slots[11]
    assert empty.slot == 12
    assert empty.count == 0
    assert math.isinf(empty.ratio)
    assert empty.ev == -math.inf
    assert empty not in out.by_ev


def test_reward_value_scales_with_motherlode() -> None:
    flat = make_round(1)
    assert reward_value(flat, 2.0) == 2.0 * REF_MULT
    rich = make_round(1, motherlode=625 * 10**11)
    assert reward_value(rich, 2.0) == pytest.approx(2.0 * REF_MULT * (1.0 + 625 * HIT_PROB))


def test_analysis_serializes_infinite_values_as_null() -> None:
    payload = _sample().as_dict()
    assert payload["best_ev"] == 7
    assert payload["slots"][11]["ratio"] is None
    assert payload["slots"][11]["ev"] is None
