"""Backend access for the viewer session.

The session only talks to the ``Backend`` protocol. ``RedisBackend`` is the
production implementation on top of ``redis.asyncio``; server-side failures
are returned as ``ErrorValue`` rather than raised, so a failing request is
displayed and recorded like any other reply.
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from typing import Any, Protocol

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from redisview.config import ViewerConfig
from redisview.keys import DatabaseSelection, format_key
from redisview.results import (
    Absent,
    Aggregate,
    ErrorValue,
    HashValue,
    ListValue,
    ResultValue,
    Scalar,
    SetValue,
    SortedSetValue,
    Unsupported,
    from_raw,
    to_text,
)

logger = logging.getLogger(__name__)

SCAN_BATCH = 1000


class Backend(Protocol):
    """Asynchronous key-value store as seen by the session controller."""

    async def get_keys(self, selection: DatabaseSelection, pattern: str) -> ResultValue: ...

    async def get_value(self, database: int, key: str) -> ResultValue: ...

    async def exec_command(self, database: int, text: str) -> ResultValue: ...

    async def aclose(self) -> None: ...


ClientFactory = Callable[[int], Any]


def client_factory_from_config(config: ViewerConfig) -> ClientFactory:
    """Return a factory creating one client per database index.

    Replies are kept as bytes and decoded by the backend, so keys and values
    that are not valid UTF-8 are still listed and shown.
    """

    def make_client(database: int) -> aioredis.Redis:
        return aioredis.Redis(
            host=config.host,
            port=config.port,
            db=database,
            username=config.username,
            password=config.password,
            ssl=config.ssl,
            decode_responses=False,
        )

    return make_client


class RedisBackend:
    """Backend over redis-py's asyncio client.

    Args:
        client_factory: Builds the client for a database index. Clients are
            created lazily and reused for the lifetime of the backend.
    """

    def __init__(self, client_factory: ClientFactory) -> None:
        self._client_factory = client_factory
        self._clients: dict[int, Any] = {}

    @classmethod
    def from_config(cls, config: ViewerConfig) -> RedisBackend:
        return cls(client_factory_from_config(config))

    def _client(self, database: int) -> Any:
        client = self._clients.get(database)
        if client is None:
            client = self._client_factory(database)
            self._clients[database] = client
        return client

    async def get_keys(self, selection: DatabaseSelection, pattern: str) -> ResultValue:
        """Scan keys matching ``pattern`` in every selected database."""
        results: list[ResultValue] = []
        for database in selection.indices():
            results.append(await self._scan(database, pattern))
        if len(results) == 1:
            return results[0]
        return Aggregate(tuple(results))

    async def _scan(self, database: int, pattern: str) -> ResultValue:
        client = self._client(database)
        try:
            keys = [key async for key in client.scan_iter(match=pattern, count=SCAN_BATCH)]
        except RedisError as e:
            logger.warning("Key scan failed on db %d: %s", database, e)
            return ErrorValue(str(e))
        logger.debug("Scanned %d keys matching %r on db %d", len(keys), pattern, database)
        return SetValue(tuple(format_key(database, to_text(key)) for key in keys))

    async def get_value(self, database: int, key: str) -> ResultValue:
        """Read a key's value, dispatching on its Redis type."""
        client = self._client(database)
        try:
            key_type = to_text(await client.type(key))
            if key_type == "string":
                raw = await client.get(key)
                return Absent() if raw is None else Scalar(to_text(raw))
            if key_type == "list":
                items = await client.lrange(key, 0, -1)
                return ListValue(tuple(to_text(item) for item in items))
            if key_type == "set":
                members = await client.smembers(key)
                return SetValue(tuple(sorted(to_text(member) for member in members)))
            if key_type == "zset":
                members = await client.zrange(key, 0, -1, withscores=True)
                return SortedSetValue(
                    tuple((to_text(member), float(score)) for member, score in members)
                )
            if key_type == "hash":
                fields = await client.hgetall(key)
                return HashValue(tuple((to_text(f), to_text(v)) for f, v in fields.items()))
            if key_type == "none":
                return Absent()
            return Unsupported(key_type.capitalize())
        except RedisError as e:
            logger.warning("Reading %r on db %d failed: %s", key, database, e)
            return ErrorValue(str(e))

    async def exec_command(self, database: int, text: str) -> ResultValue:
        """Run a free-form command typed by the user."""
        try:
            args = shlex.split(text)
        except ValueError as e:
            return ErrorValue(f"Cannot parse command: {e}")
        if not args:
            return ErrorValue("Empty command")
        client = self._client(database)
        try:
            raw = await client.execute_command(*args)
        except RedisError as e:
            logger.info("Command %r on db %d failed: %s", args[0], database, e)
            return ErrorValue(str(e))
        return from_raw(raw)

    async def aclose(self) -> None:
        """Close every client created so far."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.aclose()
