from __future__ import annotations

import asyncio
import logging

from aiohttp import web

from orebot.config.automation import AutomationConfig, parse_bool
from orebot.data.snapshot_store import SnapshotStore
from orebot.errors import ConfigError
from orebot.infra.log import get_logger

HTML = """<!doctype html><html><head><meta charset='utf-8'><title>orebot</title></head>
<body style='font-family:monospace;background:#0b0b0b;color:#f2e9d8;padding:16px'>
<h2>orebot</h2>
<div>
  <select id='mode'><option>idle</option><option>top1</option><option>top3</option>
  <option>top5</option><option>top25</option></select>
  <button onclick="post('/api/mode',{mode:document.getElementById('mode').value})">set mode</button>
  <button onclick="post('/api/dry-run',{})">toggle dry run</button>
  <input id='amount' size='8' placeholder='sol/target'>
  <button onclick="post('/api/amount',{amount:document.getElementById('amount').value})">set amount</button>
  <span id='msg'></span>
</div>
<pre id='out'>loading...</pre>
<script>
async function post(path, body){
  const r=await fetch(path,{method:'POST',headers:{'Content-Type':'application/json'},body:JSON.stringify(body)});
  const j=await r.json();
  document.getElementById('msg').textContent=j.error||'ok';
  tick();
}
async function tick(){
  try{
    const r=await fetch('/api',{cache:'no-store'});
    const j=await r.json();
    document.getElementById('out').textContent=JSON.stringify(j,null,2);
  }catch(e){document.getElementById('out').textContent='dashboard error: '+e;}
}
setInterval(tick,1000);tick();
</script>
</body></html>"""


async def _json_body(req: web.Request) -> dict:
    try:
        body = await req.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def build_app(store: SnapshotStore, config: AutomationConfig, log: logging.Logger | None = None) -> web.Application:
    log = log or get_logger("orebot-dashboard")

    def _bad(exc: ConfigError) -> web.Response:
        log.warning("rejected config change: %s", exc)
        return web.json_response({"ok": False, "error": str(exc)}, status=400)

    async def handle_html(_req: web.Request) -> web.Response:
        return web.Response(text=HTML, content_type="text/html")

    async def handle_api(_req: web.Request) -> web.Response:
        return web.json_response(store.read(), headers={"Cache-Control": "no-store"})

    async def handle_mode(req: web.Request) -> web.Response:
        body = await _json_body(req)
        try:
            mode = config.set_mode(body.get("mode", ""))
        except ConfigError as exc:
            return _bad(exc)
        log.info("mode set to %s", mode.value)
        return web.json_response({"ok": True, "config": config.as_dict()})

    async def handle_dry_run(req: web.Request) -> web.Response:
        body = await _json_body(req)
        if "enabled" in body:
            try:
                enabled = config.set_dry_run(parse_bool(body["enabled"]))
            except ConfigError as exc:
                return _bad(exc)
        else:
            enabled = config.toggle_dry_run()
        log.info("dry run %s", "on" if enabled else "off")
        return web.json_response({"ok": True, "config": config.as_dict()})

    async def handle_amount(req: web.Request) -> web.Response:
        body = await _json_body(req)
        try:
            amount = config.set_deploy_amount(body.get("amount"))
        except ConfigError as exc:
            return _bad(exc)
        log.info("deploy amount set to %s sol/target", amount)
        return web.json_response({"ok": True, "config": config.as_dict()})

    app = web.Application()
    app.router.add_get("/", handle_html)
    app.router.add_get("/api", handle_api)
    app.router.add_post("/api/mode", handle_mode)
    app.router.add_post("/api/dry-run", handle_dry_run)
    app.router.add_post("/api/amount", handle_amount)
    return app


async def run_dashboard(
    *,
    data_dir: str,
    port: int,
    config: AutomationConfig,
    log_level: str = "INFO",
) -> None:
    log = get_logger("orebot-dashboard", log_level)
    app = build_app(SnapshotStore(data_dir), config, log)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    log.info("dashboard running on http://127.0.0.1:%s", port)
    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await runner.cleanup()
