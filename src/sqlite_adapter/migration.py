# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Migration concurrency guard.

Generic migrators serialize concurrent runs by locking the migrations table
on one connection (``SELECT ... FOR UPDATE``) while another connection runs
the migrations. SQLite has no such lock, so the lock clause is removed and
migrations run unlocked. Exclusion between migrator processes is left to
the operator: only one migrator may run at a time.

A pool of exactly one connection is rejected outright. It means the caller
expected the two-connection protocol with a pool that cannot provide it;
the configuration is never silently corrected.

Usage:
    query = MigrationQuery(source="schema_migrations")

    async def run(query: MigrationQuery) -> list[int]:
        ...  # apply pending migrations

    versions = await lock_for_migrations(config, query, run)
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from enum import Enum
from typing import TypeVar, Union

from .config import AdapterConfig
from .errors import ConfigError, MigrationLockError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_LOCK_CLAUSE = "FOR UPDATE"


class MigrationLockMode(str, Enum):
    """How a migration run is serialized. Chosen once, before the run starts."""

    MULTI_CONNECTION_LOCK = "multi_connection_lock"
    SINGLE_CONNECTION_FALLBACK = "single_connection_fallback"


class MigrationState(str, Enum):
    NOT_STARTED = "not_started"
    REJECTED = "rejected"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class MigrationQuery:
    """The query a generic migrator uses to read the migrations table.

    Attributes:
        source: Name of the migrations table.
        lock: Lock clause appended to the query; None runs unlocked.
    """

    source: str = "schema_migrations"
    lock: str | None = DEFAULT_LOCK_CLAUSE

    @property
    def requested_mode(self) -> MigrationLockMode:
        if self.lock:
            return MigrationLockMode.MULTI_CONNECTION_LOCK
        return MigrationLockMode.SINGLE_CONNECTION_FALLBACK


MigrationCallback = Callable[[MigrationQuery], Union[T, Awaitable[T]]]


_TRANSITIONS: dict[MigrationState, frozenset[MigrationState]] = {
    MigrationState.NOT_STARTED: frozenset({MigrationState.REJECTED, MigrationState.RUNNING}),
    MigrationState.RUNNING: frozenset({MigrationState.COMPLETED, MigrationState.FAILED}),
    MigrationState.REJECTED: frozenset(),
    MigrationState.COMPLETED: frozenset(),
    MigrationState.FAILED: frozenset(),
}


class MigrationRun:
    """State of one guarded migration run.

    The lock mode is resolved once; trying to change it afterwards raises.
    """

    def __init__(self) -> None:
        self.state = MigrationState.NOT_STARTED
        self._mode: MigrationLockMode | None = None
        self.error: BaseException | None = None

    @property
    def mode(self) -> MigrationLockMode | None:
        return self._mode

    def resolve_mode(self, pool_size: int | None) -> MigrationLockMode:
        """Pick the lock mode from pool capacity and freeze it for the run.

        Raises:
            MigrationLockError: If pool_size is 1 (run becomes REJECTED).
            ConfigError: If pool_size is below 1 (run becomes REJECTED).
        """
        if self._mode is not None:
            raise RuntimeError(f"Migration lock mode already resolved to {self._mode.value}")
        try:
            self._mode = resolve_lock_mode(pool_size)
        except ConfigError as e:
            self.error = e
            self._transition(MigrationState.REJECTED)
            raise
        return self._mode

    def start(self) -> None:
        self._transition(MigrationState.RUNNING)

    def complete(self) -> None:
        self._transition(MigrationState.COMPLETED)

    def fail(self, error: BaseException) -> None:
        self.error = error
        self._transition(MigrationState.FAILED)

    def _transition(self, target: MigrationState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid migration state change {self.state.value} -> {target.value}")
        self.state = target


def resolve_lock_mode(pool_size: int | None) -> MigrationLockMode:
    """Map configured pool capacity to a lock mode.

    SQLite cannot provide MULTI_CONNECTION_LOCK, so any usable pool gets
    SINGLE_CONNECTION_FALLBACK. An unset pool size is treated as usable.

    Raises:
        MigrationLockError: If pool_size is exactly 1.
        ConfigError: If pool_size is below 1.
    """
    if pool_size is not None:
        if pool_size == 1:
            raise MigrationLockError(pool_size)
        if pool_size < 1:
            raise ConfigError(f"pool_size must be at least 1, got {pool_size}")
    return MigrationLockMode.SINGLE_CONNECTION_FALLBACK


async def lock_for_migrations(
    config: AdapterConfig,
    query: MigrationQuery,
    callback: MigrationCallback[T],
    run: MigrationRun | None = None,
) -> T:
    """Run ``callback`` with the lock clause removed from ``query``.

    Args:
        config: Adapter configuration; only ``pool_size`` is used.
        query: The generic migrator's migrations-table query.
        callback: Sync or async callable applying migrations.
        run: Optional MigrationRun to observe the state machine.

    Returns:
        Whatever the callback returns.

    Raises:
        MigrationLockError: If the pool has exactly one connection. The
            callback is not invoked.
    """
    run = run or MigrationRun()
    mode = run.resolve_mode(config.pool_size)
    logger.debug(
        "Migration lock: requested %s, using %s (pool_size=%s)",
        query.requested_mode.value,
        mode.value,
        config.pool_size,
    )

    unlocked = replace(query, lock=None)
    run.start()
    try:
        result = callback(unlocked)
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        run.fail(e)
        raise
    run.complete()
    return result


__all__ = [
    "DEFAULT_LOCK_CLAUSE",
    "MigrationLockMode",
    "MigrationQuery",
    "MigrationRun",
    "MigrationState",
    "lock_for_migrations",
    "resolve_lock_mode",
]
