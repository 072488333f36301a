"""HTTP layer: authentication, capability gates and error mapping."""
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from agency_pricing.auth.deps import get_current_user, get_role_capabilities
from agency_pricing.auth.rbac import Capability, RoleCapabilities
from agency_pricing.database import get_db
from agency_pricing.main import app
from agency_pricing.models.usage import UsageEvent
from agency_pricing.routers import simulations as simulations_router
from agency_pricing.services.simulation_service import CommitOutcome, CommitStatus

DRAFT = {
    "client_name": "Banque Atlantique",
    "client_type_id": 1,
    "project_type_id": 2,
    "margin_percentage": 40,
    "units_by_role_id": {"1": 10},
    "mode": "daily",
}

NEW_ACCOUNT = {
    "email": "intrus@agency.local",
    "password": "motdepasse",
    "full_name": "Intrus",
    "role": "admin",
}


@pytest.fixture
def client(session):
    async def override_db():
        yield session

    app.dependency_overrides[get_db] = override_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login_as():
    """Sign in a user holding exactly the given capabilities."""

    def factory(*capabilities: Capability, user_id: int = 7):
        user = SimpleNamespace(
            id=user_id,
            email="awa@agency.local",
            full_name="Awa Diop",
            is_active=True,
            role_assignment=None,
        )
        role = RoleCapabilities(role_name="Essai", capabilities={c.value: True for c in capabilities})
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_role_capabilities] = lambda: role
        return user

    return factory


class TestAuthentication:
    def test_me_without_token(self, client):
        response = client.get("/auth/me")
        assert response.status_code == 401

    def test_me_with_bad_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_me_returns_resolved_capabilities(self, client, login_as):
        login_as(Capability.CREATE_SIMULATIONS)
        response = client.get("/auth/me")
        assert response.status_code == 200
        assert response.json()["permissions"] == {"can_create_simulations": True}

    def test_no_public_sign_up(self, client, session):
        response = client.post("/auth/register", json=NEW_ACCOUNT)
        assert response.status_code in (404, 405)
        assert session.added == []

    def test_simulations_need_a_token(self, client):
        assert client.get("/simulations").status_code == 401


class TestUserManagement:
    def test_anonymous_cannot_create_accounts(self, client, session):
        assert client.post("/users", json=NEW_ACCOUNT).status_code == 401
        assert session.added == []

    def test_account_creation_needs_manage_users(self, client, session, login_as):
        login_as(Capability.CREATE_SIMULATIONS, Capability.MANAGE_ROLES)
        response = client.post("/users", json=NEW_ACCOUNT)
        assert response.status_code == 403
        assert "can_manage_users" in response.json()["detail"]
        assert session.added == []

    def test_role_change_needs_manage_users(self, client, login_as):
        login_as(Capability.DELETE_USERS)
        response = client.patch("/users/5/role", json={"role": "admin"})
        assert response.status_code == 403

    def test_delete_needs_delete_users(self, client, login_as):
        login_as(Capability.MANAGE_USERS)
        assert client.delete("/users/8").status_code == 403

    def test_cannot_delete_own_account(self, client, login_as):
        login_as(Capability.DELETE_USERS, user_id=7)
        response = client.delete("/users/7")
        assert response.status_code == 400

    def test_list_users(self, client, login_as):
        login_as(Capability.MANAGE_USERS)
        response = client.get("/users")
        assert response.status_code == 200
        assert response.json() == []


class TestCatalogGates:
    def test_margin_delete_without_capability(self, client, login_as):
        login_as(Capability.EDIT_DAILY_RATES)
        assert client.delete("/settings/margins/5").status_code == 403

    def test_margin_delete_with_capability_reaches_catalog(self, client, login_as):
        login_as(Capability.EDIT_MARGINS)
        assert client.delete("/settings/margins/5").status_code == 404


class TestCreateSimulation:
    def test_needs_create_capability(self, client, login_as):
        login_as(Capability.VIEW_ANALYTICS)
        assert client.post("/simulations", json=DRAFT).status_code == 403

    def test_rejected_draft_is_bad_request(self, client, session, login_as):
        login_as(Capability.CREATE_SIMULATIONS)
        response = client.post("/simulations", json=DRAFT)
        assert response.status_code == 400
        assert "Unknown client type" in response.json()["detail"]
        assert not any(isinstance(obj, UsageEvent) for obj in session.added)

    def test_store_failure_is_service_unavailable(self, client, session, login_as, monkeypatch):
        class FailingWorkflow:
            def __init__(self, **kwargs):
                pass

            async def commit(self, draft, author_id, author_display_name):
                return CommitOutcome(status=CommitStatus.FAILED, errors=["Could not save simulation"])

        monkeypatch.setattr(simulations_router, "SimulationWorkflow", FailingWorkflow)
        login_as(Capability.CREATE_SIMULATIONS)
        response = client.post("/simulations", json=DRAFT)
        assert response.status_code == 503
        assert response.json()["detail"] == ["Could not save simulation"]
        assert not any(isinstance(obj, UsageEvent) for obj in session.added)


class TestListScope:
    def test_own_records_only(self, client, session, login_as):
        login_as(Capability.CREATE_SIMULATIONS, user_id=7)
        assert client.get("/simulations").status_code == 200
        statement = session.executed[-1]
        assert "simulations.created_by" in str(statement.whereclause)
        assert statement.compile().params["created_by_1"] == 7

    def test_view_all_sees_everyone(self, client, session, login_as):
        login_as(Capability.VIEW_ALL_SIMULATIONS)
        assert client.get("/simulations").status_code == 200
        statement = session.executed[-1]
        assert statement.whereclause is None
