"""Role resolution and the client-side permission model.

resolve_role() picks a user's capability map: a directly assigned custom
role wins, otherwise the legacy role tag is mapped onto its system role
through LEGACY_ROLE_TO_SYSTEM_ROLE, otherwise the user gets nothing.

PermissionModel keeps that resolution current for one signed-in identity.
Queries fail closed while a resolution is in flight; overlapping
resolutions settle on the most recent one, and a result that arrives after
the identity changed is dropped.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any, Protocol

from agency_pricing.auth.rbac import EMPTY_ROLE, LEGACY_ROLE_TO_SYSTEM_ROLE, Capability, RoleCapabilities
from agency_pricing.models.user import LegacyRole

logger = logging.getLogger(__name__)


class RoleRecord(Protocol):
    id: int
    name: str
    permissions: Mapping[str, Any]


class RoleAssignment(Protocol):
    role: LegacyRole | str | None
    custom_role_id: int | None


class RoleSource(Protocol):
    """Read access to role data; implemented over the database by services.role_service."""

    async def get_assignment(self, user_id: int) -> RoleAssignment | None: ...

    async def get_custom_role(self, role_id: int) -> RoleRecord | None: ...

    async def get_system_role(self, name: str) -> RoleRecord | None: ...


IdentityListener = Callable[[int | None], None]


class IdentityProvider(Protocol):
    def current_user_id(self) -> int | None: ...

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]: ...


def _to_capabilities(record: RoleRecord) -> RoleCapabilities:
    return RoleCapabilities(role_id=record.id, role_name=record.name, capabilities=record.permissions or {})


def _legacy_role(value: LegacyRole | str | None) -> LegacyRole | None:
    if value is None:
        return None
    try:
        return LegacyRole(value)
    except ValueError:
        return None


async def resolve_role(source: RoleSource, user_id: int) -> RoleCapabilities:
    """Resolve a user's role. Lookup failures degrade to EMPTY_ROLE."""
    try:
        assignment = await source.get_assignment(user_id)
        if assignment is None:
            return EMPTY_ROLE

        if assignment.custom_role_id is not None:
            custom = await source.get_custom_role(assignment.custom_role_id)
            if custom is not None:
                return _to_capabilities(custom)
            logger.warning(
                "User %s references missing custom role %s, falling back to legacy role",
                user_id,
                assignment.custom_role_id,
            )

        legacy = _legacy_role(assignment.role)
        if legacy is None:
            return EMPTY_ROLE
        system = await source.get_system_role(LEGACY_ROLE_TO_SYSTEM_ROLE[legacy])
        if system is None:
            logger.warning("System role for legacy tag %r is missing", legacy.value)
            return EMPTY_ROLE
        return _to_capabilities(system)
    except Exception:
        logger.exception("Role resolution failed for user %s", user_id)
        return EMPTY_ROLE


class SessionIdentity:
    """In-process identity holder that notifies listeners on login/logout."""

    def __init__(self, user_id: int | None = None) -> None:
        self._user_id = user_id
        self._listeners: list[IdentityListener] = []

    def current_user_id(self) -> int | None:
        return self._user_id

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def login(self, user_id: int) -> None:
        self._set(user_id)

    def logout(self) -> None:
        self._set(None)

    def _set(self, user_id: int | None) -> None:
        self._user_id = user_id
        for listener in list(self._listeners):
            listener(user_id)


class PermissionModel:
    def __init__(self, source: RoleSource, identity: IdentityProvider) -> None:
        self._source = source
        self._identity = identity
        self._role: RoleCapabilities = EMPTY_ROLE
        self._loading = True
        self._generation = 0
        self._pending: set[asyncio.Task] = set()
        self._unsubscribe = identity.subscribe(self._on_identity_change)

    # -- state -----------------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def role_id(self) -> int | None:
        return self._role.role_id

    @property
    def role_name(self) -> str | None:
        return self._role.role_name

    @property
    def capabilities(self) -> Mapping[str, bool]:
        return self._role.capabilities

    def snapshot(self) -> RoleCapabilities:
        return self._role

    # -- queries (denied while loading) ------------------------------------

    def has_capability(self, capability: Capability | str) -> bool:
        return not self._loading and self._role.has_capability(capability)

    def has_any_capability(self, capabilities: Iterable[Capability | str]) -> bool:
        return not self._loading and self._role.has_any_capability(capabilities)

    def has_all_capabilities(self, capabilities: Iterable[Capability | str]) -> bool:
        return not self._loading and self._role.has_all_capabilities(capabilities)

    # -- resolution ----------------------------------------------------------

    async def refresh(self) -> RoleCapabilities:
        """Re-resolve for the current identity. Safe to call repeatedly."""
        self._generation += 1
        generation = self._generation
        user_id = self._identity.current_user_id()

        if user_id is None:
            self._settle(EMPTY_ROLE)
            return self._role

        self._loading = True
        resolved = await resolve_role(self._source, user_id)

        if generation != self._generation:
            logger.debug("Dropping superseded role resolution for user %s", user_id)
            return self._role
        if self._identity.current_user_id() != user_id:
            logger.debug("Dropping role resolution for user %s: identity changed", user_id)
            return self._role

        self._settle(resolved)
        return self._role

    async def wait_settled(self) -> None:
        """Wait for resolutions scheduled by identity changes."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def close(self) -> None:
        self._unsubscribe()
        for task in self._pending:
            task.cancel()

    def _settle(self, role: RoleCapabilities) -> None:
        self._role = role
        self._loading = False

    def _on_identity_change(self, user_id: int | None) -> None:
        if user_id is None:
            # Logout applies immediately and invalidates anything in flight
            self._generation += 1
            self._settle(EMPTY_ROLE)
            return
        self._loading = True
        self._schedule(self.refresh())

    def _schedule(self, coro: Awaitable[RoleCapabilities]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
