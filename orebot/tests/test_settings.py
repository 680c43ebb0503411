import pytest

from orebot.config import AutomationConfig, Mode, load_settings
from orebot.errors import ConfigError


def test_load_settings_defaults(monkeypatch) -> None:
    for key in ("RPC_URL", "WS_URL", "DRY_RUN", "APP_MODE", "DEPLOY_AMOUNT_SOL", "DASHBOARD_PORT"):
        monkeypatch.delenv(key, raising=False)
    s = load_settings(env_file=None)
    assert s.rpc_url == "https://api.mainnet-beta.solana.com"
    assert s.ws_url == "wss://api.mainnet-beta.solana.com"
    assert s.dry_run is True
    assert s.app_mode == "idle"
    assert s.deploy_amount_sol == 0.0001
    assert s.dashboard_port == 8080


def test_load_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("RPC_URL", "http://localhost:8899")
    monkeypatch.delenv("WS_URL", raising=False)
    monkeypatch.setenv("DRY_RUN", "false")
    monkeypatch.setenv("APP_MODE", " TOP3 ")
    monkeypatch.setenv("DEPLOY_AMOUNT_SOL", "0.02")
    monkeypatch.setenv("PRICE_UPDATE_SEC", "1")
    s = load_settings(env_file=None)
    assert s.ws_url == "ws://localhost:8899"
    assert s.dry_run is False
    assert s.app_mode == "top3"
    assert s.price_update_sec == 5.0

    cfg = AutomationConfig.from_settings(s)
    assert cfg.mode is Mode.TOP3
    assert cfg.deploy_amount_sol == 0.02
    assert cfg.dry_run is False


def test_bad_mode_in_env_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("APP_MODE", "top7")
    with pytest.raises(ConfigError):
        AutomationConfig.from_settings(load_settings(env_file=None))


def test_env_file_is_loaded(monkeypatch, tmp_path) -> None:
    # Register the key so the value loaded from the file is undone afterwards.
    monkeypatch.setenv("DASHBOARD_PORT", "1")
    monkeypatch.delenv("DASHBOARD_PORT")
    env = tmp_path / "orebot.env"
    env.write_text("DASHBOARD_PORT=9191\n")
    s = load_settings(env_file=str(env))
    assert s.dashboard_port == 9191
