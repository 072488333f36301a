"""Capability maps, role resolution and the permission model."""
import asyncio
from types import SimpleNamespace

import pytest

from agency_pricing.auth.permissions import PermissionModel, SessionIdentity, resolve_role
from agency_pricing.auth.rbac import (
    EMPTY_ROLE,
    SYSTEM_ROLES,
    Capability,
    RoleCapabilities,
    unknown_capabilities,
)


class FakeRoleSource:
    """Role data in dicts. A gate registered for a user holds that user's lookup open."""

    def __init__(self, assignments=None, roles=None):
        self.assignments = assignments or {}
        self.roles = roles or {}
        self.gates: dict[int, asyncio.Event] = {}
        self.fail = False

    async def get_assignment(self, user_id):
        # read before waiting so a held lookup returns what was current when it started
        assignment = self.assignments.get(user_id)
        gate = self.gates.get(user_id)
        if gate is not None:
            await gate.wait()
        if self.fail:
            raise RuntimeError("database unavailable")
        return assignment

    async def get_custom_role(self, role_id):
        return self.roles.get(role_id)

    async def get_system_role(self, name):
        for role in self.roles.values():
            if role.name == name and role.is_system:
                return role
        return None


def assignment(role=None, custom_role_id=None):
    return SimpleNamespace(role=role, custom_role_id=custom_role_id)


@pytest.fixture
def source():
    roles = {}
    for role_id, (name, (_, permissions)) in enumerate(SYSTEM_ROLES.items(), start=1):
        roles[role_id] = SimpleNamespace(id=role_id, name=name, permissions=permissions, is_system=True)
    roles[10] = SimpleNamespace(
        id=10,
        name="Gestionnaire marges",
        permissions={Capability.EDIT_MARGINS.value: True},
        is_system=False,
    )
    return FakeRoleSource(
        assignments={
            1: assignment(role="sales"),
            2: assignment(role="admin"),
            3: assignment(role="sales", custom_role_id=10),
            4: assignment(role="project_manager", custom_role_id=99),
            5: assignment(role="guest"),
        },
        roles=roles,
    )


class TestRoleCapabilities:
    def test_single_capability_map(self):
        role = RoleCapabilities(role_name="Marges", capabilities={"can_edit_margins": True})
        assert role.has_capability("can_edit_margins") is True
        assert role.has_capability(Capability.EDIT_MARGINS) is True
        assert role.has_capability("can_manage_users") is False
        assert role.has_any_capability(["can_manage_users", "can_edit_margins"]) is True
        assert role.has_all_capabilities(["can_manage_users", "can_edit_margins"]) is False

    def test_non_boolean_values_are_denied(self):
        role = RoleCapabilities(capabilities={"can_edit_margins": "yes", "can_view_analytics": 1})
        assert role.capabilities == {}
        assert not role.has_capability("can_view_analytics")

    def test_explicit_false_is_denied(self):
        role = RoleCapabilities(capabilities={"can_edit_margins": False})
        assert not role.has_any_capability(["can_edit_margins"])

    def test_empty_queries(self):
        assert EMPTY_ROLE.is_empty
        assert EMPTY_ROLE.has_any_capability([]) is False
        assert EMPTY_ROLE.has_all_capabilities([]) is True

    def test_map_is_read_only(self):
        role = RoleCapabilities(capabilities={"can_edit_margins": True})
        with pytest.raises(TypeError):
            role.capabilities["can_manage_users"] = True

    def test_unknown_capabilities(self):
        assert unknown_capabilities(["can_edit_margins", "can_fly", "can_dance"]) == ["can_dance", "can_fly"]

    def test_admin_system_role_holds_everything(self):
        _, permissions = SYSTEM_ROLES["Admin"]
        assert RoleCapabilities(capabilities=permissions).has_all_capabilities(list(Capability))


class TestResolveRole:
    def test_legacy_tag_maps_to_system_role(self, source):
        role = asyncio.run(resolve_role(source, 1))
        assert role.role_name == "Commercial"
        assert role.has_capability(Capability.CREATE_SIMULATIONS)
        assert not role.has_capability(Capability.EDIT_MARGINS)

    def test_custom_role_wins(self, source):
        role = asyncio.run(resolve_role(source, 3))
        assert role.role_id == 10
        assert role.has_capability(Capability.EDIT_MARGINS)
        assert not role.has_capability(Capability.CREATE_SIMULATIONS)

    def test_missing_custom_role_falls_back_to_legacy(self, source):
        role = asyncio.run(resolve_role(source, 4))
        assert role.role_name == "Chef de Projet"

    def test_unknown_legacy_tag_resolves_empty(self, source):
        assert asyncio.run(resolve_role(source, 5)) is EMPTY_ROLE

    def test_no_assignment_resolves_empty(self, source):
        assert asyncio.run(resolve_role(source, 404)) is EMPTY_ROLE

    def test_lookup_failure_degrades_to_empty(self, source):
        source.fail = True
        assert asyncio.run(resolve_role(source, 2)) is EMPTY_ROLE


class TestPermissionModel:
    def test_denies_everything_until_resolved(self, source):
        async def run():
            model = PermissionModel(source, SessionIdentity(user_id=2))
            before = (model.is_loading, model.has_capability(Capability.MANAGE_ROLES))
            await model.refresh()
            after = (model.is_loading, model.has_capability(Capability.MANAGE_ROLES))
            return before, after

        before, after = asyncio.run(run())
        assert before == (True, False)
        assert after == (False, True)

    def test_login_triggers_resolution(self, source):
        async def run():
            identity = SessionIdentity()
            model = PermissionModel(source, identity)
            identity.login(3)
            loading = model.is_loading
            await model.wait_settled()
            return loading, model.snapshot()

        loading, role = asyncio.run(run())
        assert loading is True
        assert role.role_id == 10

    def test_latest_resolution_wins(self, source):
        async def run():
            model = PermissionModel(source, SessionIdentity(user_id=1))
            source.gates[1] = gate = asyncio.Event()
            slow = asyncio.create_task(model.refresh())
            await asyncio.sleep(0)

            # role changes while the first lookup is still held open
            del source.gates[1]
            source.assignments[1] = assignment(role="admin")
            await model.refresh()
            gate.set()
            await slow
            return model

        model = asyncio.run(run())
        assert model.role_name == "Admin"
        assert model.has_capability(Capability.MANAGE_USERS)

    def test_logout_discards_inflight_resolution(self, source):
        async def run():
            identity = SessionIdentity()
            model = PermissionModel(source, identity)
            source.gates[2] = gate = asyncio.Event()
            identity.login(2)
            await asyncio.sleep(0)
            loading_after_login = model.is_loading
            identity.logout()
            state_after_logout = (model.is_loading, model.role_name)
            gate.set()
            await model.wait_settled()
            return loading_after_login, state_after_logout, model

        loading_after_login, state_after_logout, model = asyncio.run(run())
        assert loading_after_login is True
        assert state_after_logout == (False, None)
        assert model.role_name is None
        assert not model.has_capability(Capability.MANAGE_USERS)

    def test_switching_user_keeps_only_the_new_role(self, source):
        async def run():
            identity = SessionIdentity()
            model = PermissionModel(source, identity)
            source.gates[2] = gate = asyncio.Event()
            identity.login(2)
            await asyncio.sleep(0)
            identity.login(1)
            await asyncio.sleep(0)
            gate.set()
            await model.wait_settled()
            return model

        model = asyncio.run(run())
        assert model.role_name == "Commercial"
        assert not model.has_capability(Capability.MANAGE_ROLES)

    def test_close_stops_listening(self, source):
        async def run():
            identity = SessionIdentity()
            model = PermissionModel(source, identity)
            model.close()
            identity.login(2)
            await asyncio.sleep(0)
            return model

        model = asyncio.run(run())
        assert model.is_loading
        assert model.role_name is None
