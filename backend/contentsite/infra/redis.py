"""Redis connection management for the content store.

One `StoreClient` is constructed by the application lifespan and handed to
request handlers through FastAPI dependencies. The underlying client is created
lazily on first use and can be swapped for a FakeRedis instance in tests.
"""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Callable, Optional, Tuple, TypeVar

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, TimeoutError as RedisTimeoutError, WatchError

from contentsite.domain.content.errors import ConcurrentModificationError, StoreUnavailableError
from contentsite.obs import metrics
from contentsite.settings import Settings, settings as default_settings

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

# mutate(current_raw_value) -> (new_raw_value, result); returning None as the
# new value leaves the key untouched.
Mutation = Callable[[Optional[str]], Tuple[Optional[str], T]]

_CONNECTION_ERRORS = (RedisConnectionError, RedisTimeoutError, OSError, asyncio.TimeoutError)


class StoreClient:
	"""Lazily connected key-value store handle shared by every request."""

	def __init__(
		self,
		client: Optional[redis.Redis] = None,
		*,
		url: Optional[str] = None,
		connect_timeout: Optional[float] = None,
		socket_timeout: Optional[float] = None,
		cas_retries: Optional[int] = None,
	) -> None:
		self._client: Optional[redis.Redis] = client
		self._url = url or default_settings.redis_url
		self._connect_timeout = connect_timeout if connect_timeout is not None else default_settings.redis_connect_timeout_seconds
		self._socket_timeout = socket_timeout if socket_timeout is not None else default_settings.redis_socket_timeout_seconds
		self._cas_retries = max(1, cas_retries if cas_retries is not None else default_settings.store_cas_retries)
		self._connected = False

	@classmethod
	def from_settings(cls, config: Settings) -> "StoreClient":
		return cls(
			url=config.redis_url,
			connect_timeout=config.redis_connect_timeout_seconds,
			socket_timeout=config.redis_socket_timeout_seconds,
			cas_retries=config.store_cas_retries,
		)

	@property
	def client(self) -> redis.Redis:
		if self._client is None:
			try:
				self._client = redis.from_url(
					self._url,
					decode_responses=True,
					socket_connect_timeout=self._connect_timeout,
					socket_timeout=self._socket_timeout,
				)
			except ValueError as exc:
				# unsupported scheme or unparseable REDIS_URL
				LOGGER.error("content store url rejected", extra={"store_url": _redact(self._url), "reason": str(exc)})
				raise StoreUnavailableError() from exc
		return self._client

	def set_client(self, client: redis.Redis) -> None:
		self._client = client
		self._connected = False

	@property
	def connected(self) -> bool:
		return self._connected

	async def ensure_connection(self) -> bool:
		"""Return True when the store answers a ping; never raises."""
		if self._connected:
			return True
		start = perf_counter()
		try:
			await asyncio.wait_for(self.client.ping(), timeout=self._connect_timeout)
		except (RedisError, StoreUnavailableError, *_CONNECTION_ERRORS):
			metrics.mark_redis(False)
			LOGGER.warning("content store unavailable", extra={"store_url": _redact(self._url)})
			return False
		self._connected = True
		metrics.mark_redis(True, latency_seconds=perf_counter() - start)
		return True

	async def ping(self) -> float:
		start = perf_counter()
		await self._call(self.client.ping)
		return perf_counter() - start

	async def get(self, key: str) -> Optional[str]:
		return await self._call(self.client.get, key)

	async def set(self, key: str, value: str) -> None:
		await self._call(self.client.set, key, value)

	async def incr(self, key: str) -> int:
		return int(await self._call(self.client.incr, key))

	async def delete(self, key: str) -> int:
		return int(await self._call(self.client.delete, key))

	async def compare_and_swap(self, key: str, mutate: Mutation[T]) -> T:
		"""Apply `mutate` to the value at `key` under WATCH/MULTI/EXEC.

		A write landing between the read and the commit aborts the transaction;
		the mutation is then re-applied to the fresh value.
		"""
		for attempt in range(self._cas_retries):
			try:
				async with self.client.pipeline(transaction=True) as pipe:
					await pipe.watch(key)
					current = await pipe.get(key)
					new_value, result = mutate(current)
					if new_value is None:
						await pipe.unwatch()
						return result
					pipe.multi()
					pipe.set(key, new_value)
					await pipe.execute()
					return result
			except WatchError:
				metrics.inc_cas_retry(key)
				LOGGER.info("content write conflict", extra={"key": key, "attempt": attempt + 1})
				continue
			except _CONNECTION_ERRORS as exc:
				self._mark_disconnected()
				raise StoreUnavailableError() from exc
		raise ConcurrentModificationError(f"gave up writing {key} after {self._cas_retries} attempts")

	async def close(self) -> None:
		if self._client is not None:
			await self._client.aclose()
		self._connected = False

	async def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
		try:
			return await fn(*args)
		except _CONNECTION_ERRORS as exc:
			self._mark_disconnected()
			raise StoreUnavailableError() from exc

	def _mark_disconnected(self) -> None:
		self._connected = False
		metrics.mark_redis(False)


def _redact(url: str) -> str:
	if "@" not in url:
		return url
	scheme, _, rest = url.partition("://")
	return f"{scheme}://****@{rest.split('@', 1)[1]}"


__all__ = ["StoreClient", "Mutation"]
