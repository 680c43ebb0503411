from __future__ import annotations

import asyncio
from functools import partial

from orebot.config import AutomationConfig, Settings
from orebot.data.http_service import HttpService
from orebot.data.ledger import LedgerClient
from orebot.data.pricing import PriceFeed
from orebot.data.snapshot_store import SnapshotStore
from orebot.data.subscriptions import AccountSubscription
from orebot.errors import ConfigError
from orebot.execution import DeploymentSequencer, ProgramAccounts
from orebot.infra import ErrorTracker, RuntimeEventLogger, get_logger, load_signer
from orebot.runtime.scheduler import PreciseTicker
from orebot.runtime.state import AppState
from orebot.runtime.supervisor import LoopSupervisor
from orebot.runtime.tracker import RoundStateTracker
from orebot.settlement import SettlementManager
from orebot.strategy import AutomationTrigger, analyze


class App:
    """Wires the ledger, tracker, trigger and background loops together."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.log = get_logger("orebot", settings.log_level)
        self.events = RuntimeEventLogger(settings.data_dir)
        self.state = AppState(config=self._automation_config())
        self.accounts = ProgramAccounts.from_settings(settings)
        self.ledger = LedgerClient(settings.rpc_url, commitment=settings.commitment)
        self.http = HttpService(errors=ErrorTracker(self.log))
        self.prices = PriceFeed(self.http, self.log)
        self.store = SnapshotStore(settings.data_dir)
        self.supervisor = LoopSupervisor(self.log, events=self.events)

        self.sequencer = DeploymentSequencer(
            self.ledger, self.state, self.accounts, log=self.log, events=self.events
        )
        self.trigger = AutomationTrigger(self.state, self.sequencer, log=self.log, events=self.events)
        self.settlement = SettlementManager(
            self.ledger,
            self.state,
            self.accounts,
            log=self.log,
            events=self.events,
            min_claim_sol=settings.min_claim_sol,
        )
        self.tracker = RoundStateTracker(
            self.state,
            self.ledger,
            self.accounts,
            self.trigger,
            log=self.log,
            subscribe=self._subscribe,
            events=self.events,
        )

    def _automation_config(self) -> AutomationConfig:
        try:
            return AutomationConfig.from_settings(self.settings)
        except ConfigError as exc:
            self.log.error("invalid automation settings (%s); starting idle in dry run", exc)
            return AutomationConfig(dry_run=True)

    def _subscribe(self, pubkey: str, handler, name: str) -> AccountSubscription:
        return AccountSubscription(
            self.settings.ws_url,
            pubkey,
            handler,
            log=self.log,
            name=name,
            commitment=self.settings.commitment,
        )

    async def _update_prices(self) -> None:
        quote = await self.prices.quote()
        self.state.prices = quote
        if quote.ore_sol > 0:
            self.log.info(
                "prices ore=$%.4f sol=$%.2f ore/sol=%.6f", quote.ore_usd, quote.sol_usd, quote.ore_sol
            )
            self.state.analysis = analyze(self.state.round_detail, quote.ore_sol)
        else:
            self.log.warning("price feed incomplete (ore=%s sol=%s); EV uses ore/sol=0", quote.ore_usd, quote.sol_usd)

    async def _auto_claim(self) -> None:
        result = await self.settlement.maybe_auto_claim()
        if result is not None and not result.ok:
            self.log.warning("auto-claim failed: %s", result.message)

    async def _snapshot_loop(self) -> None:
        while True:
            try:
                snap = self.state.snapshot()
                snap["recent_winners"] = [
                    {"round": r, "slot": s} for r, s in reversed(self.tracker.winners)
                ]
                self.store.write(snap)
            except Exception as exc:
                self.log.warning("snapshot loop error: %s", exc)
            await asyncio.sleep(1.0)

    async def _health_loop(self) -> None:
        while True:
            self.log.info("runtime-health %s", self.supervisor.health.summary())
            await asyncio.sleep(60.0)

    async def _start_board_stream(self) -> AccountSubscription:
        board_pda = self.accounts.board()
        self.log.info("applying board: %s", board_pda)
        raw = await self.ledger.get_account_data(board_pda)
        if raw is None:
            raise RuntimeError("failed to fetch initial board account")
        await self.tracker.on_board(raw)
        board_sub = self._subscribe(str(board_pda), self.tracker.on_board, "board")
        board_sub.start()
        return board_sub

    async def run(self) -> None:
        s = self.settings
        self.log.info(
            "starting orebot rpc=%s mode=%s dry_run=%s amount=%s",
            s.rpc_url,
            self.state.config.mode.value,
            self.state.config.dry_run,
            self.state.config.deploy_amount_sol,
        )
        self.events.emit("engine.start", rpc=s.rpc_url, mode=self.state.config.mode.value)
        self.state.signer = load_signer(s.keypair_path, self.log)

        board_sub = None
        try:
            await self._update_prices()
            await self.settlement.refresh_miner()
            board_sub = await self._start_board_stream()

            ticker = PreciseTicker(1.0, self.tracker.tick, log=self.log, name="countdown")
            sup = self.supervisor
            loops = [
                sup.run_forever("countdown", ticker.run),
                sup.run_forever("prices", partial(sup.every, "prices", s.price_update_sec, self._update_prices)),
                sup.run_forever("miner", partial(sup.every, "miner", s.miner_refresh_sec, self.settlement.refresh_miner)),
                sup.run_forever("claim", partial(sup.every, "claim", s.claim_interval_sec, self._auto_claim)),
                sup.run_forever("snapshot", self._snapshot_loop),
                sup.run_forever("health", self._health_loop),
            ]
            if s.dashboard_enabled:
                from orebot.dashboard import run_dashboard

                loops.append(
                    sup.run_forever(
                        "dashboard",
                        partial(
                            run_dashboard,
                            data_dir=s.data_dir,
                            port=s.dashboard_port,
                            config=self.state.config,
                            log_level=s.log_level,
                        ),
                    )
                )
            await asyncio.gather(*loops)
        finally:
            if board_sub is not None:
                await board_sub.stop()
            await self.tracker.close()
            await self.http.close()
            await self.ledger.close()


def run_main(settings: Settings) -> None:
    try:
        if settings.use_uvloop:
            import uvloop

            uvloop.run(App(settings).run())
        else:
            asyncio.run(App(settings).run())
    except KeyboardInterrupt:
        pass
