# =============================================================================
# lib/sync/conflict_resolver.py - Local/Remote Conflict Resolution
# =============================================================================
# Decides what a record should look like when the same row changed both on
# the device and on the server.
#
# Strategies:
# - last-write-wins (default): newer timestamp wins
# - local-wins / remote-wins: fixed side wins
# - manual: a registered callback decides, else last-write-wins
# =============================================================================

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Literal

from lib.utils import ApplicationError, parse_timestamp

logger = logging.getLogger(__name__)

ConflictStrategy = Literal["last-write-wins", "local-wins", "remote-wins", "manual"]
Winner = Literal["local", "remote", "merged"]

STRATEGIES: tuple[str, ...] = ("last-write-wins", "local-wins", "remote-wins", "manual")


@dataclass
class Conflict:
    """A record that diverged between device and server."""
    table_name: str
    record_id: str
    local_values: dict[str, Any]
    remote_values: dict[str, Any]
    local_timestamp: datetime
    remote_timestamp: datetime
    changed_fields: list[str] = field(default_factory=list)


@dataclass
class Resolution:
    """The values to keep and how they were chosen."""
    resolved_values: dict[str, Any]
    strategy: ConflictStrategy
    winner: Winner


ManualResolver = Callable[[Conflict], dict[str, Any]]


class UnknownStrategyError(ApplicationError):
    def __init__(self, strategy: str):
        super().__init__(
            message=f"Unknown conflict strategy: {strategy}",
            code="UNKNOWN_CONFLICT_STRATEGY",
            suggestion=f"Use one of: {', '.join(STRATEGIES)}",
        )


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


def changed_fields(local_values: dict[str, Any], remote_values: dict[str, Any]) -> list[str]:
    """Fields whose JSON representation differs between the two sides."""
    keys = sorted(set(local_values) | set(remote_values))
    return [
        key for key in keys
        if _canonical(local_values.get(key)) != _canonical(remote_values.get(key))
    ]


def is_equivalent(local_values: dict[str, Any], remote_values: dict[str, Any]) -> bool:
    return not changed_fields(local_values, remote_values)


class ConflictResolver:
    """
    Configurable resolver.

    Example:
        resolver = ConflictResolver()
        conflict = resolver.detect_conflict("jobs", job_id, local, remote, local_ts, remote_ts)
        if conflict:
            values = resolver.resolve(conflict).resolved_values
    """

    def __init__(self, strategy: ConflictStrategy = "last-write-wins"):
        self.set_strategy(strategy)
        self._manual_resolver: ManualResolver | None = None

    def set_strategy(self, strategy: ConflictStrategy) -> None:
        if strategy not in STRATEGIES:
            raise UnknownStrategyError(strategy)
        self.strategy: ConflictStrategy = strategy

    def set_manual_resolver(self, resolver: ManualResolver | None) -> None:
        self._manual_resolver = resolver

    def detect_conflict(
        self,
        table_name: str,
        record_id: str,
        local_values: dict[str, Any],
        remote_values: dict[str, Any],
        local_timestamp: datetime | str,
        remote_timestamp: datetime | str,
    ) -> Conflict | None:
        """
        Return a Conflict when the sides differ and the server copy is newer.

        A remote copy that is the same age or older cannot have overwritten
        the local edit, so it is not a conflict.
        """
        fields = changed_fields(local_values, remote_values)
        if not fields:
            return None

        local_ts = parse_timestamp(local_timestamp)
        remote_ts = parse_timestamp(remote_timestamp)
        if remote_ts <= local_ts:
            return None

        logger.debug(f"Conflict on {table_name}/{record_id}: {fields}")
        return Conflict(
            table_name=table_name,
            record_id=str(record_id),
            local_values=local_values,
            remote_values=remote_values,
            local_timestamp=local_ts,
            remote_timestamp=remote_ts,
            changed_fields=fields,
        )

    def resolve(self, conflict: Conflict) -> Resolution:
        if self.strategy == "local-wins":
            return Resolution(dict(conflict.local_values), "local-wins", "local")

        if self.strategy == "remote-wins":
            return Resolution(dict(conflict.remote_values), "remote-wins", "remote")

        if self.strategy == "last-write-wins":
            return self._last_write_wins(conflict)

        if self.strategy == "manual":
            if self._manual_resolver is None:
                logger.warning("Manual conflict strategy without a resolver, using last-write-wins")
                return self._last_write_wins(conflict)
            return Resolution(self._manual_resolver(conflict), "manual", "merged")

        raise UnknownStrategyError(self.strategy)

    def _last_write_wins(self, conflict: Conflict) -> Resolution:
        if conflict.remote_timestamp > conflict.local_timestamp:
            return Resolution(dict(conflict.remote_values), "last-write-wins", "remote")
        return Resolution(dict(conflict.local_values), "last-write-wins", "local")

    def resolve_with_merge(
        self,
        conflict: Conflict,
        field_strategy: dict[str, Literal["local", "remote"]],
    ) -> Resolution:
        """
        Field-by-field merge starting from the server copy.

        Fields mapped to "local" take the device value; everything else
        keeps the remote value.
        """
        merged = dict(conflict.remote_values)
        for field_name, side in field_strategy.items():
            if side == "local" and field_name in conflict.local_values:
                merged[field_name] = conflict.local_values[field_name]
            elif side == "remote" and field_name in conflict.remote_values:
                merged[field_name] = conflict.remote_values[field_name]

        return Resolution(merged, "manual", "merged")
