from __future__ import annotations

import asyncio
import base64
import itertools
import logging
from collections.abc import Awaitable, Callable

import orjson
import websockets

Handler = Callable[[bytes], Awaitable[None]]

_request_ids = itertools.count(1)


def account_subscribe_request(pubkey: str, commitment: str) -> tuple[int, bytes]:
    req_id = next(_request_ids)
    body = {
        "jsonrpc": "2.0",
        "id": req_id,
        "method": "accountSubscribe",
        "params": [pubkey, {"encoding": "base64", "commitment": commitment}],
    }
    return req_id, orjson.dumps(body)


def notification_data(msg: dict) -> bytes | None:
    """Account bytes carried by an ``accountNotification`` frame, else None."""
    if msg.get("method") != "accountNotification":
        return None
    value = ((msg.get("params") or {}).get("result") or {}).get("value")
    if not value:
        return None
    data = value.get("data")
    if isinstance(data, list) and data:
        return base64.b64decode(data[0])
    return None


class AccountSubscription:
    """One account-change stream; frames are queued and handled by a single consumer.

    The handler for a frame runs to completion before the next frame is
    dispatched. Connection drops are retried with exponential backoff.
    """

    def __init__(
        self,
        ws_url: str,
        pubkey: str,
        handler: Handler,
        *,
        log: logging.Logger,
        name: str,
        commitment: str = "confirmed",
    ):
        self.ws_url = ws_url
        self.pubkey = pubkey
        self.handler = handler
        self.log = log
        self.name = name
        self.commitment = commitment
        self.queue: asyncio.Queue[bytes] = asyncio.Queue()
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    def start(self) -> None:
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._reader(), name=f"sub-read:{self.name}"),
            asyncio.create_task(self._consumer(), name=f"sub-handle:{self.name}"),
        ]

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for t in tasks:
            t.cancel()
        for t in tasks:
            try:
                await t
            except asyncio.CancelledError:
                pass
            except Exception as exc:
                self.log.warning("subscription %s stopped with error: %s", self.name, exc)

    async def _reader(self) -> None:
        delay = 2
        while True:
            try:
                async with websockets.connect(self.ws_url, ping_interval=20, ping_timeout=30) as ws:
                    req_id, request = account_subscribe_request(self.pubkey, self.commitment)
                    await ws.send(request.decode())
                    self.log.debug("subscription %s connected (request %s)", self.name, req_id)
                    delay = 2
                    async for raw in ws:
                        data = notification_data(orjson.loads(raw))
                        if data is not None:
                            self.queue.put_nowait(data)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self.log.warning("subscription %s dropped: %s (reconnect in %ss)", self.name, exc, delay)
                await asyncio.sleep(delay)
                delay = min(delay * 2, 60)

    async def _consumer(self) -> None:
        while True:
            data = await self.queue.get()
            try:
                await self.handler(data)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self.log.error("subscription %s handler error: %s", self.name, exc)
            finally:
                self.queue.task_done()
