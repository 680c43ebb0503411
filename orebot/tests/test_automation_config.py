import pytest

from orebot.config import AutomationConfig, Mode, parse_bool
from orebot.errors import ConfigError


def test_mode_target_counts() -> None:
    assert [m.target_count for m in Mode] == [0, 1, 3, 5, 25]


def test_set_mode_accepts_names_and_enum() -> None:
    cfg = AutomationConfig()
    assert cfg.set_mode("Top5") is Mode.TOP5
    assert cfg.set_mode(Mode.TOP1) is Mode.TOP1


def test_set_mode_rejects_unknown_without_change() -> None:
    cfg = AutomationConfig(mode=Mode.TOP3)
    with pytest.raises(ConfigError):
        cfg.set_mode("top4")
    assert cfg.mode is Mode.TOP3


@pytest.mark.parametrize("raw", ["abc", "", None, "0", "-1", "nan", "inf", -0.5])
def test_set_deploy_amount_rejects_bad_values(raw) -> None:
    cfg = AutomationConfig(deploy_amount_sol=0.01)
    with pytest.raises(ConfigError):
        cfg.set_deploy_amount(raw)
    assert cfg.deploy_amount_sol == 0.01


def test_set_deploy_amount_parses_text() -> None:
    cfg = AutomationConfig()
    assert cfg.set_deploy_amount(" 0.5 ") == 0.5
    assert cfg.as_dict() == {"mode": "idle", "dry_run": False, "deploy_amount_sol": 0.5}


def test_dry_run_toggle() -> None:
    cfg = AutomationConfig()
    assert cfg.toggle_dry_run() is True
    assert cfg.toggle_dry_run() is False
    assert cfg.set_dry_run(True) is True


def test_parse_bool() -> None:
    assert parse_bool(True) is True
    assert parse_bool("false") is False
    assert parse_bool(" On ") is True
    assert parse_bool(0) is False
    assert parse_bool("1") is True
    with pytest.raises(ConfigError):
        parse_bool("maybe")
    with pytest.raises(ConfigError):
        parse_bool(None)
