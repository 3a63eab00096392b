"""Generic dual-mode repository: one interface, two interchangeable backends.

Each entity repository owns a local-blob backend and a remote-row backend
that expose the same coroutine methods. The facade resolves the mode for the
calling session on every operation and delegates.
"""
from __future__ import annotations
from typing import Generic, TypeVar

from mealsync.domain.Session import Session
from mealsync.infra.mode import ModeResolver
from mealsync.utilities.errors import StorageUnavailable

B = TypeVar("B")


class DualModeRepository(Generic[B]):
    def __init__(self, local: B, remote: B, resolver: ModeResolver):
        self.local = local
        self.remote = remote
        self.resolver = resolver

    def backend(self, session: Session) -> B:
        if self.resolver.is_offline(session.user_id):
            return self.local
        return self.remote

    def is_offline(self, session: Session) -> bool:
        return self.resolver.is_offline(session.user_id)


class LocalBackend:
    """Base for backends that read/write JSON blobs in device storage."""

    def __init__(self, storage):
        self.storage = storage


class RemoteBackend:
    """Base for backends that talk to the remote store."""

    def __init__(self, store):
        self._store = store

    @property
    def store(self):
        if self._store is None:
            raise StorageUnavailable("No remote store is configured for this deployment")
        return self._store
