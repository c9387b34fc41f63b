"""Login/logout and the role guard for the portal's routes."""
from __future__ import annotations

import re
from dataclasses import dataclass, field

from portal.api import PortalClient
from portal.errors import AuthError, NetworkError
from portal.log import get_logger
from portal.models import COMPANY, RECRUITER, Session
from portal.session import SessionStore

log = get_logger(__name__)

LOGIN_ROUTE = "/login"


def dashboard_for(role: str) -> str:
    return f"/{role}/dashboard"


@dataclass(frozen=True)
class Allowed:
    pass


@dataclass(frozen=True)
class Redirect:
    target: str


def authorize(session: Session | None, required_role: str | None = None) -> Allowed | Redirect:
    """Decide whether ``session`` may open a view restricted to ``required_role``.

    A visitor without a session goes to the login view. A session with the
    wrong role is sent to its own dashboard instead of being refused.
    """
    if session is None:
        return Redirect(LOGIN_ROUTE)
    if required_role and session.role != required_role:
        return Redirect(dashboard_for(session.role))
    return Allowed()


@dataclass(frozen=True)
class Route:
    pattern: str
    name: str
    role: str | None = None
    title: str = ""

    @property
    def public(self) -> bool:
        return self.pattern == LOGIN_ROUTE

    def match(self, path: str) -> dict[str, str] | None:
        regex = "^" + re.sub(r"<(\w+)>", r"(?P<\1>[^/]+)", self.pattern) + "/?$"
        m = re.match(regex, path)
        return m.groupdict() if m else None

    def build(self, **params: str) -> str:
        path = self.pattern
        for key, value in params.items():
            path = path.replace(f"<{key}>", value)
        return path


ROUTES: tuple[Route, ...] = (
    Route(LOGIN_ROUTE, "login", None, "Login"),
    Route("/recruiter/dashboard", "recruiter_dashboard", RECRUITER, "Dashboard"),
    Route("/recruiter/jobs", "recruiter_jobs", RECRUITER, "Jobs"),
    Route("/recruiter/recommend/<job_id>", "recruiter_recommend", RECRUITER, "Recommend Candidate"),
    Route("/recruiter/recommendations", "recruiter_recommendations", RECRUITER, "Recommendations"),
    Route("/company/dashboard", "company_dashboard", COMPANY, "Dashboard"),
    Route("/company/jobs/new", "company_post_job", COMPANY, "Post Job"),
    Route("/company/recommendations", "company_recommendations", COMPANY, "Recommendations"),
)

ROUTES_BY_NAME: dict[str, Route] = {r.name: r for r in ROUTES}

NAV_LINKS: dict[str, tuple[str, ...]] = {
    RECRUITER: ("/recruiter/dashboard", "/recruiter/jobs", "/recruiter/recommendations"),
    COMPANY: ("/company/dashboard", "/company/jobs/new", "/company/recommendations"),
}


@dataclass(frozen=True)
class Resolved:
    route: Route
    params: dict[str, str] = field(default_factory=dict)


def find_route(path: str) -> Resolved | None:
    for route in ROUTES:
        params = route.match(path)
        if params is not None:
            return Resolved(route, params)
    return None


def resolve(path: str, session: Session | None) -> Resolved | Redirect:
    """Match ``path`` against the route table and apply the guard."""
    found = find_route(path)
    if found is None:
        # "/" and anything unknown land on the login view
        return Redirect(LOGIN_ROUTE)
    if found.route.public:
        return found
    decision = authorize(session, found.route.role)
    if isinstance(decision, Redirect):
        log.info("Guard: %s -> %s", path, decision.target)
        return decision
    return found


def nav_links(session: Session | None) -> list[Route]:
    """Navigation entries for the signed-in role; empty when logged out."""
    if session is None:
        return []
    return [find_route(p).route for p in NAV_LINKS.get(session.role, ())]


class Auth:
    def __init__(self, client: PortalClient, store: SessionStore) -> None:
        self.client = client
        self.store = store

    def get_session(self) -> Session | None:
        return self.store.get_session()

    def login(self, email: str, password: str) -> Session:
        try:
            session = self.client.login(email, password)
        except NetworkError as exc:
            log.warning("Login for %s failed: %s", email, exc)
            raise AuthError(exc.message) from exc
        except AuthError as exc:
            log.info("Login for %s rejected: %s", email, exc)
            raise
        self.store.save(session)
        return session

    def logout(self) -> None:
        self.store.clear()
