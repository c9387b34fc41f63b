"""Login view: the only route reachable without a session."""
from __future__ import annotations

from portal.auth import LOGIN_ROUTE, Auth, dashboard_for
from portal.errors import AuthError, ValidationError
from portal.log import get_logger
from portal.views.base import View, require

log = get_logger(__name__)

DEMO_ACCOUNTS: tuple[tuple[str, str, str], ...] = (
    ("Recruiter", "recruiter@example.com", "password123"),
    ("Company", "contact@techventure.com", "password123"),
)


class LoginView(View):
    route = LOGIN_ROUTE
    title = "VC Portfolio Platform"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.auth = Auth(self.client, self.store)
        self.email = ""
        self.password = ""

    def _on_session_change(self, session) -> None:
        # Logging in from this view must not unmount it
        pass

    def submit(self, email: str | None = None, password: str | None = None) -> bool:
        if email is not None:
            self.email = email
        if password is not None:
            self.password = password
        self.error = None
        try:
            require(self, ("email", "password"), {"email": "Email", "password": "Password"})
        except ValidationError as exc:
            self.error = exc.message
            return False

        self.loading = True
        try:
            session = self.auth.login(self.email.strip(), self.password)
        except AuthError as exc:
            self.error = exc.message
            return False
        finally:
            self.loading = False

        self.password = ""
        self.navigate_to = dashboard_for(session.role)
        return True
