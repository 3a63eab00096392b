"""Async client for the remote relational store (Supabase REST / PostgREST).

Every call is scoped to the caller's identity: reads and deletes always carry
``user_id=eq.<caller>``, and writes are rejected when a row names another
owner. HTTP failures are translated into the mealsync error taxonomy.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import httpx

from mealsync.domain.Session import Session
from mealsync.utilities.config import REMOTE_STORE_KEY, REMOTE_STORE_URL, REMOTE_TIMEOUT_SECONDS
from mealsync.utilities.errors import (
    MalformedRecord,
    NotFound,
    PermissionDenied,
    StorageUnavailable,
)

logger = logging.getLogger(__name__)

OWNER_COLUMN = "user_id"
SINGLE_OBJECT = "application/vnd.pgrst.object+json"
NO_ROWS_CODE = "PGRST116"  # single-row fetch matched zero (or several) rows

Filters = Sequence[Tuple[str, str]]
Row = Dict[str, Any]


def eq(value: Any) -> str:
    return f"eq.{value}"


def gte(value: Any) -> str:
    return f"gte.{value}"


def lte(value: Any) -> str:
    return f"lte.{value}"


class RemoteStore:
    def __init__(self, base_url: str = REMOTE_STORE_URL, api_key: str = REMOTE_STORE_KEY,
                 timeout: float = REMOTE_TIMEOUT_SECONDS,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.auth_url = f"{base_url.rstrip('/')}/auth/v1"
        self._client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---------- helpers ----------

    def _headers(self, session: Session, prefer: Optional[str] = None, single: bool = False) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {session.access_token or self.api_key}",
        }
        if prefer:
            headers["Prefer"] = prefer
        if single:
            headers["Accept"] = SINGLE_OBJECT
        return headers

    @staticmethod
    def _scoped(session: Session, filters: Optional[Filters]) -> List[Tuple[str, str]]:
        params = [(OWNER_COLUMN, eq(session.user_id))]
        for column, expr in filters or ():
            if column == OWNER_COLUMN:
                raise PermissionDenied("Owner filter is fixed by the session and cannot be overridden")
            params.append((column, expr))
        return params

    @staticmethod
    def _owned_rows(session: Session, rows: Union[Row, List[Row]]) -> List[Row]:
        rows = [rows] if isinstance(rows, dict) else list(rows)
        owned = []
        for row in rows:
            owner = row.get(OWNER_COLUMN, session.user_id)
            if owner != session.user_id:
                raise PermissionDenied(f"Refusing to write a row owned by '{owner}'")
            owned.append({**row, OWNER_COLUMN: session.user_id})
        return owned

    async def _request(self, method: str, table: str, session: Session, *,
                       params: Optional[List[Tuple[str, str]]] = None, body: Any = None,
                       prefer: Optional[str] = None, single: bool = False) -> Any:
        try:
            response = await self._client.request(
                method, f"/{table}", params=params, json=body,
                headers=self._headers(session, prefer=prefer, single=single),
            )
        except httpx.TransportError as e:
            logger.error(f"Remote store unreachable ({method} {table}): {e}")
            raise StorageUnavailable(f"Remote store unreachable: {e}") from e

        if response.is_error:
            self._raise_for_status(method, table, response)
        if not response.content:
            return None if single else []
        try:
            return response.json()
        except ValueError as e:
            raise MalformedRecord(f"Remote store returned invalid JSON for {table}") from e

    @staticmethod
    def _raise_for_status(method: str, table: str, response: httpx.Response) -> None:
        status = response.status_code
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        code = payload.get("code", "") if isinstance(payload, dict) else ""
        message = payload.get("message", response.text) if isinstance(payload, dict) else response.text

        if (status == 406 and code == NO_ROWS_CODE) or status == 404:
            raise NotFound(f"No matching row in {table}", detail=message)
        logger.error(f"Remote store error {status} on {method} {table}: {code} {message}")
        if status in (401, 403):
            raise PermissionDenied(f"Access to {table} denied", detail=message)
        if status >= 500 or status in (408, 429):
            raise StorageUnavailable(f"Remote store failed with {status}", detail=message)
        raise MalformedRecord(f"Remote store rejected {method} {table} ({status})", detail=message)

    # ---------- operations ----------

    async def select(self, session: Session, table: str, *, filters: Optional[Filters] = None,
                     columns: str = "*", order: Optional[str] = None, limit: Optional[int] = None,
                     single: bool = False) -> Any:
        """Rows owned by the caller. ``single=True`` raises NotFound on zero rows."""
        params = [("select", columns)] + self._scoped(session, filters)
        if order:
            params.append(("order", order))
        if limit is not None:
            params.append(("limit", str(limit)))
        return await self._request("GET", table, session, params=params, single=single)

    async def insert(self, session: Session, table: str, rows: Union[Row, List[Row]]) -> List[Row]:
        return await self._request("POST", table, session, body=self._owned_rows(session, rows),
                                   prefer="return=representation")

    async def upsert(self, session: Session, table: str, rows: Union[Row, List[Row]], *,
                     on_conflict: str) -> List[Row]:
        """Insert-or-merge against the named uniqueness constraint."""
        return await self._request("POST", table, session, params=[("on_conflict", on_conflict)],
                                   body=self._owned_rows(session, rows),
                                   prefer="resolution=merge-duplicates,return=representation")

    async def update(self, session: Session, table: str, values: Row, *,
                     filters: Optional[Filters] = None) -> List[Row]:
        if OWNER_COLUMN in values and values[OWNER_COLUMN] != session.user_id:
            raise PermissionDenied("Cannot reassign row ownership")
        return await self._request("PATCH", table, session, params=self._scoped(session, filters),
                                   body=values, prefer="return=representation")

    async def delete(self, session: Session, table: str, *, filters: Optional[Filters] = None) -> List[Row]:
        return await self._request("DELETE", table, session, params=self._scoped(session, filters),
                                   prefer="return=representation")

    async def insert_anonymous(self, session: Session, table: str, rows: Union[Row, List[Row]]) -> List[Row]:
        """Insert rows that belong to nobody (``user_id`` null)."""
        rows = [rows] if isinstance(rows, dict) else list(rows)
        body = [{**row, OWNER_COLUMN: None} for row in rows]
        return await self._request("POST", table, session, body=body, prefer="return=minimal")

    async def get_user(self, session: Session) -> Row:
        """The auth user the session's access token belongs to."""
        if not session.access_token:
            raise PermissionDenied("No access token to verify")
        try:
            response = await self._client.get(f"{self.auth_url}/user", headers=self._headers(session))
        except httpx.TransportError as e:
            logger.error(f"Auth endpoint unreachable: {e}")
            raise StorageUnavailable(f"Remote store unreachable: {e}") from e
        if response.is_error:
            self._raise_for_status("GET", "auth user", response)
        try:
            user = response.json()
        except ValueError as e:
            raise MalformedRecord("Auth endpoint returned invalid JSON") from e
        if not isinstance(user, dict) or not user.get("id"):
            raise MalformedRecord("Auth endpoint returned no user id")
        return user
