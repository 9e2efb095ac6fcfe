"""Optimistic mutations against a remote collaborator.

A mutation captures a snapshot of local state, applies the change locally,
and then confirms it with the remote side. On failure the caller-supplied
``recover`` callback receives the snapshot. Mutations are keyed (a cart
line id, for instance) and carry a sequence number: when a newer mutation
on the same key has started in the meantime, the older one is superseded
and neither reconciles nor recovers over the newer local value.
"""

import itertools
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import structlog

from ordering.collaborators.port import CollaboratorError

logger = structlog.get_logger(__name__)

S = TypeVar("S")


@dataclass(frozen=True)
class MutationResult:
    key: Hashable
    succeeded: bool
    superseded: bool = False
    error: str | None = None


class OptimisticMutation(Generic[S]):
    def __init__(self, capture: Callable[[], S]) -> None:
        self._capture = capture
        self._latest: dict[Hashable, int] = {}
        self._sequence = itertools.count(1)

    def in_flight(self, key: Hashable) -> bool:
        return key in self._latest

    def run(
        self,
        key: Hashable,
        apply: Callable[[], None],
        confirm: Callable[[], Any],
        recover: Callable[[S], None],
        reconcile: Callable[[Any], None] | None = None,
    ) -> MutationResult:
        snapshot = self._capture()
        token = next(self._sequence)
        self._latest[key] = token

        apply()
        try:
            confirmed = confirm()
        except CollaboratorError as exc:
            current = self._release(key, token)
            if current:
                recover(snapshot)
            logger.warning(
                "Optimistic mutation failed",
                key=key,
                superseded=not current,
                error=str(exc),
            )
            return MutationResult(key=key, succeeded=False, superseded=not current, error=str(exc))

        current = self._release(key, token)
        if current and reconcile is not None:
            reconcile(confirmed)
        return MutationResult(key=key, succeeded=True, superseded=not current)

    def _release(self, key: Hashable, token: int) -> bool:
        """Drop the in-flight marker if ``token`` is still the latest for ``key``."""
        if self._latest.get(key) == token:
            del self._latest[key]
            return True
        return False
