from __future__ import annotations

import asyncio
import random
import time
import urllib.parse

import aiohttp
import orjson

from orebot.infra.errors import ErrorTracker


class HttpService:
    """Shared HTTP layer with host pacing, 429/5xx retry and stale cache fallback."""

    def __init__(
        self,
        *,
        errors: ErrorTracker,
        conn_limit: int = 8,
        min_gap_ms: float = 250.0,
        retries_429: int = 2,
        retries_5xx: int = 1,
        default_cache_ttl: float = 5.0,
        default_stale_ttl: float = 300.0,
    ):
        self._conn_limit = max(1, int(conn_limit))
        self._min_gap_s = max(0.0, float(min_gap_ms) / 1000.0)
        self._retries_429 = max(0, int(retries_429))
        self._retries_5xx = max(0, int(retries_5xx))
        self._cache_ttl = max(0.0, float(default_cache_ttl))
        self._stale_ttl = max(1.0, float(default_stale_ttl))
        self._errors = errors

        self._session: aiohttp.ClientSession | None = None
        self._host_backoff: dict[str, float] = {}
        self._cache: dict[str, dict] = {}
        self._host_last_ts: dict[str, float] = {}
        self._host_locks: dict[str, asyncio.Lock] = {}

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()

    async def _ensure_session(self) -> None:
        if self._session is not None and not self._session.closed:
            return
        self._session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=self._conn_limit, enable_cleanup_closed=True),
            headers={"User-Agent": "orebot/2.0"},
        )

    def _stale(self, key: str, stale_ttl: float):
        cached = self._cache.get(key)
        if cached is not None and (time.time() - cached["ts"]) <= stale_ttl:
            return cached
        return None

    async def get_json(
        self,
        url: str,
        *,
        params: dict | None = None,
        timeout: float = 8.0,
        cache_ttl: float | None = None,
        stale_ttl: float | None = None,
    ):
        cache_ttl = self._cache_ttl if cache_ttl is None else max(0.0, float(cache_ttl))
        stale_ttl = self._stale_ttl if stale_ttl is None else max(1.0, float(stale_ttl))

        host = urllib.parse.urlparse(url).netloc
        key = f"{url}?{orjson.dumps(params or {}, option=orjson.OPT_SORT_KEYS).decode()}"
        cached = self._cache.get(key)
        if cached is not None and (time.time() - cached["ts"]) <= cache_ttl:
            return cached["data"]

        await self._ensure_session()
        assert self._session is not None

        lock = self._host_locks.setdefault(host, asyncio.Lock())
        async with lock:
            last_ts = self._host_last_ts.get(host, 0.0)
            gap = time.time() - last_ts
            if last_ts > 0 and gap < self._min_gap_s:
                await asyncio.sleep(self._min_gap_s - gap)
            self._host_last_ts[host] = time.time()

            backoff_until = self._host_backoff.get(host, 0.0)
            if backoff_until > time.time():
                stale = self._stale(key, stale_ttl)
                if stale is not None:
                    return stale["data"]
                raise RuntimeError(f"http 429 backoff active for {host} ({backoff_until - time.time():.0f}s left)")

            last_err: Exception | None = None
            attempts = max(1, self._retries_429 + 1)
            for i in range(attempts):
                try:
                    async with self._session.get(
                        url,
                        params=params,
                        timeout=aiohttp.ClientTimeout(total=timeout),
                    ) as r:
                        if r.status == 429:
                            retry_after = max(1.0, float(r.headers.get("Retry-After", "2") or 2.0))
                            backoff_s = min(90.0, retry_after + 0.35 * i + random.uniform(0.05, 0.35))
                            self._host_backoff[host] = max(backoff_until, time.time() + backoff_s)
                            if i < attempts - 1:
                                await asyncio.sleep(backoff_s)
                                continue
                            raise RuntimeError(f"http 429 {url}")

                        if r.status >= 500 and i < self._retries_5xx:
                            await asyncio.sleep(0.25 + 0.25 * i)
                            continue

                        if r.status >= 400:
                            raise RuntimeError(f"http {r.status} {url}")

                        payload = orjson.loads(await r.read())
                        self._cache[key] = {"ts": time.time(), "data": payload}
                        self._errors.clear(f"http:{host}")
                        return payload
                except RuntimeError as e:
                    last_err = e
                    break
                except (aiohttp.ClientError, asyncio.TimeoutError, orjson.JSONDecodeError) as e:
                    last_err = e
                    if i < attempts - 1:
                        await asyncio.sleep(0.20 + 0.15 * i)
                        continue

            stale = self._stale(key, stale_ttl)
            if stale is not None:
                return stale["data"]

            self._errors.tick(f"http:{host}", err=last_err, every=20)
            raise RuntimeError(f"http get failed: {url} err={last_err}")
