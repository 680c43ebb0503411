from __future__ import annotations

import os
import sys
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_ENV_FILE = "~/.orebot.env"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int, min_value: int | None = None) -> int:
    raw = os.environ.get(name)
    if raw is None:
        value = default
    else:
        value = int(raw)
    if min_value is not None:
        value = max(min_value, value)
    return value


def _env_float(name: str, default: float, min_value: float | None = None) -> float:
    raw = os.environ.get(name)
    if raw is None:
        value = default
    else:
        value = float(raw)
    if min_value is not None:
        value = max(min_value, value)
    return value


def _ws_url_for(rpc_url: str) -> str:
    if rpc_url.startswith("https://"):
        return "wss://" + rpc_url[len("https://"):]
    if rpc_url.startswith("http://"):
        return "ws://" + rpc_url[len("http://"):]
    return rpc_url


@dataclass(frozen=True)
class Settings:
    rpc_url: str
    ws_url: str
    commitment: str
    keypair_path: str
    data_dir: str
    log_level: str
    dry_run: bool
    app_mode: str
    deploy_amount_sol: float
    dashboard_enabled: bool
    dashboard_port: int
    price_update_sec: float
    miner_refresh_sec: float
    claim_interval_sec: float
    min_claim_sol: float
    entropy_program_id: str
    var_address: str
    use_uvloop: bool


def load_settings(env_file: str | None = DEFAULT_ENV_FILE) -> Settings:
    if env_file:
        load_dotenv(os.path.expanduser(env_file))
    rpc_url = os.environ.get("RPC_URL", "https://api.mainnet-beta.solana.com").strip()
    return Settings(
        rpc_url=rpc_url,
        ws_url=os.environ.get("WS_URL", _ws_url_for(rpc_url)).strip(),
        commitment=os.environ.get("COMMITMENT", "confirmed").strip().lower(),
        keypair_path=os.environ.get("KEYPAIR_PATH", "~/.config/solana/id.json"),
        data_dir=os.environ.get("DATA_DIR", os.path.expanduser("~/.orebot")),
        log_level=os.environ.get("LOG_LEVEL", "INFO").strip().upper(),
        dry_run=_env_bool("DRY_RUN", True),
        app_mode=os.environ.get("APP_MODE", "idle").strip().lower(),
        deploy_amount_sol=_env_float("DEPLOY_AMOUNT_SOL", 0.0001),
        dashboard_enabled=_env_bool("DASHBOARD_ENABLED", True),
        dashboard_port=_env_int("DASHBOARD_PORT", 8080, min_value=1),
        price_update_sec=_env_float("PRICE_UPDATE_SEC", 60.0, min_value=5.0),
        miner_refresh_sec=_env_float("MINER_REFRESH_SEC", 15.0, min_value=1.0),
        claim_interval_sec=_env_float("CLAIM_INTERVAL_SEC", 300.0, min_value=10.0),
        min_claim_sol=_env_float("MIN_CLAIM_SOL", 0.001, min_value=0.0),
        entropy_program_id=os.environ.get("ENTROPY_PROGRAM_ID", "").strip(),
        var_address=os.environ.get("VAR_ADDRESS", "").strip(),
        use_uvloop=_env_bool("USE_UVLOOP", sys.platform != "win32"),
    )
