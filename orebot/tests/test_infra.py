import logging
from pathlib import Path

import orjson
from solders.keypair import Keypair

from orebot.infra import ErrorTracker, RuntimeEventLogger, load_signer
from orebot.tests.helpers import quiet_logger


def test_event_log_appends_jsonl(tmp_path: Path) -> None:
    events = RuntimeEventLogger(str(tmp_path))
    events.emit("round.start", round_id=1)
    events.emit("round.winner", round_id=1, slot=9)
    lines = events.path.read_bytes().splitlines()
    assert [orjson.loads(x)["event"] for x in lines] == ["round.start", "round.winner"]
    assert events.last["slot"] == 9


def test_event_log_without_dir_keeps_last_only() -> None:
    events = RuntimeEventLogger(None)
    events.emit("engine.start")
    assert events.path is None
    assert events.last["event"] == "engine.start"


def test_error_tracker_throttles(caplog) -> None:
    log = logging.getLogger("orebot-errors-test")
    tracker = ErrorTracker(log)
    with caplog.at_level(logging.WARNING, logger="orebot-errors-test"):
        for _ in range(9):
            tracker.tick("rpc", err="timeout", every=5)
    assert len(caplog.records) == 2
    tracker.clear("rpc")
    assert "rpc" not in tracker.counts


def test_load_signer(tmp_path: Path) -> None:
    kp = Keypair()
    path = tmp_path / "id.json"
    path.write_bytes(orjson.dumps(list(bytes(kp))))
    loaded = load_signer(str(path), quiet_logger())
    assert loaded is not None
    assert loaded.pubkey() == kp.pubkey()
    assert load_signer(str(tmp_path / "missing.json"), quiet_logger()) is None
