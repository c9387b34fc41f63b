"""Unit tests for login/logout and the route guard."""

from unittest.mock import MagicMock

import pytest
import requests

from portal.api import PortalClient
from portal.auth import (
    LOGIN_ROUTE,
    Allowed,
    Auth,
    Redirect,
    Resolved,
    authorize,
    dashboard_for,
    nav_links,
    resolve,
)
from portal.errors import AuthError, NetworkError
from portal.models import COMPANY, RECRUITER, ROLES, Session, User


def _session(role):
    return Session(token="t", user=User(id="u", role=role, email="x@example.com"))


class TestAuthorize:
    @pytest.mark.parametrize("role", ROLES)
    def test_matching_role_is_allowed(self, role):
        assert authorize(_session(role), role) == Allowed()

    @pytest.mark.parametrize("role,required", [(RECRUITER, COMPANY), (COMPANY, RECRUITER)])
    def test_role_mismatch_redirects_to_own_dashboard(self, role, required):
        decision = authorize(_session(role), required)

        assert decision == Redirect(dashboard_for(role))
        assert decision.target != LOGIN_ROUTE

    @pytest.mark.parametrize("required", [RECRUITER, COMPANY, None])
    def test_no_session_redirects_to_login(self, required):
        assert authorize(None, required) == Redirect(LOGIN_ROUTE)

    @pytest.mark.parametrize("role", ROLES)
    def test_no_required_role_accepts_any_session(self, role):
        assert authorize(_session(role)) == Allowed()


class TestResolve:
    def test_recommend_route_captures_job_id(self):
        result = resolve("/recruiter/recommend/j42", _session(RECRUITER))

        assert isinstance(result, Resolved)
        assert result.route.name == "recruiter_recommend"
        assert result.params == {"job_id": "j42"}

    def test_login_is_public(self):
        result = resolve(LOGIN_ROUTE, None)

        assert isinstance(result, Resolved)
        assert result.route.name == "login"

    @pytest.mark.parametrize("path", ["/", "/nowhere", "/recruiter/unknown"])
    def test_root_and_unknown_paths_go_to_login(self, path):
        assert resolve(path, _session(RECRUITER)) == Redirect(LOGIN_ROUTE)

    def test_company_route_for_recruiter_redirects_to_recruiter_dashboard(self):
        assert resolve("/company/dashboard", _session(RECRUITER)) == Redirect("/recruiter/dashboard")

    def test_guarded_route_without_session_redirects_to_login(self):
        assert resolve("/company/jobs/new", None) == Redirect(LOGIN_ROUTE)

    def test_trailing_slash_matches(self):
        result = resolve("/company/recommendations/", _session(COMPANY))

        assert isinstance(result, Resolved)


def test_nav_links_per_role():
    assert [r.title for r in nav_links(_session(RECRUITER))] == ["Dashboard", "Jobs", "Recommendations"]
    assert [r.title for r in nav_links(_session(COMPANY))] == ["Dashboard", "Post Job", "Recommendations"]
    assert nav_links(None) == []


class TestAuthService:
    def test_recruiter_login_then_company_dashboard_redirects(self, client, store):
        auth = Auth(client, store)

        session = auth.login("recruiter@example.com", "password123")

        assert session.role == RECRUITER
        assert store.get_session().token == session.token
        assert resolve("/company/dashboard", auth.get_session()) == Redirect("/recruiter/dashboard")

    def test_bad_credentials_raise_and_persist_nothing(self, client, store):
        with pytest.raises(AuthError) as exc_info:
            Auth(client, store).login("recruiter@example.com", "wrong")

        assert exc_info.value.status == 401
        assert exc_info.value.message == "Invalid credentials"
        assert store.get_session() is None

    def test_network_failure_surfaces_as_auth_error(self, store):
        http = MagicMock()
        http.request.side_effect = requests.ConnectionError("refused")
        client = PortalClient("https://api.test/api", store.get_token, http=http)

        with pytest.raises(AuthError) as exc_info:
            Auth(client, store).login("recruiter@example.com", "password123")

        assert isinstance(exc_info.value.__cause__, NetworkError)
        assert exc_info.value.status is None
        assert store.get_session() is None

    def test_logout_clears_session_without_server_call(self, client, store, backend):
        auth = Auth(client, store)
        auth.login("contact@techventure.com", "password123")
        calls_before = len(backend.calls)

        auth.logout()

        assert auth.get_session() is None
        assert len(backend.calls) == calls_before
