"""REST client for the portal backend.

Every method is one blocking round trip. Errors are never recovered here:
non-2xx responses and transport failures become ``portal.errors`` exceptions
carrying the HTTP status and the backend message.
"""
from __future__ import annotations

from typing import Any, Callable, Mapping

import requests

from portal.errors import ApiError, AuthError, NetworkError, error_for_status
from portal.log import get_logger
from portal.models import (
    DRAFT,
    Candidate,
    Job,
    JobDraft,
    Recommendation,
    Session,
    Stats,
    User,
)

log = get_logger(__name__)

TokenProvider = Callable[[], str | None]


def _clean_params(filters: Mapping[str, Any] | None) -> dict[str, str]:
    return {k: str(v) for k, v in (filters or {}).items() if v not in (None, "")}


def _message(response: requests.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        msg = body.get("message") or body.get("error")
        return str(msg) if msg else None
    return None


class PortalClient:
    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider | None = None,
        timeout: float = 15.0,
        http: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider or (lambda: None)
        self.timeout = timeout
        self.http = http or requests.Session()

    def pinned(self) -> PortalClient:
        """Copy of this client whose token is read once, on the calling thread.

        Streamlit session state is only visible from the script thread, so
        anything handed to worker threads must use a pinned client.
        """
        token = self.token_provider()
        return PortalClient(self.base_url, lambda: token, self.timeout, self.http)

    # ── transport ────────────────────────────────────────────────────────

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        token = self.token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        payload: Any = None,
        expect_object: bool = False,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            r = self.http.request(
                method,
                url,
                params=_clean_params(params) or None,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            log.warning("%s %s: no response: %s", method, path, exc)
            raise NetworkError() from exc

        if not 200 <= r.status_code < 300:
            err = error_for_status(r.status_code, _message(r))
            log.debug("%s %s -> %d %s", method, path, r.status_code, err.message)
            raise err

        log.debug("%s %s -> %d", method, path, r.status_code)
        data = None
        if r.status_code != 204 and r.content:
            try:
                data = r.json()
            except ValueError as exc:
                raise ApiError("Malformed response from server", r.status_code) from exc
        if expect_object and not isinstance(data, dict):
            raise ApiError("Malformed response from server", r.status_code)
        return data

    # ── auth ─────────────────────────────────────────────────────────────

    def login(self, email: str, password: str) -> Session:
        try:
            data = self._request("POST", "/auth/login", payload={"email": email, "password": password})
        except NetworkError:
            raise
        except ApiError as exc:
            raise AuthError(exc.detail, exc.status) from exc
        if not isinstance(data, dict) or not data.get("token") or not isinstance(data.get("user"), dict):
            raise AuthError("Login response did not include a token")
        return Session(token=str(data["token"]), user=User.from_api(data["user"]))

    # ── jobs ─────────────────────────────────────────────────────────────

    def list_jobs(self, filters: Mapping[str, Any] | None = None) -> list[Job]:
        data = self._request("GET", "/jobs", params=filters)
        return [Job.from_api(item) for item in data or []]

    def get_job(self, job_id: str) -> Job:
        return Job.from_api(self._request("GET", f"/jobs/{job_id}", expect_object=True))

    def create_job(self, draft: JobDraft | Mapping[str, Any]) -> Job:
        payload = draft.to_payload() if isinstance(draft, JobDraft) else dict(draft)
        return Job.from_api(self._request("POST", "/jobs", payload=payload, expect_object=True))

    def get_job_stats(self) -> Stats:
        return Stats.from_api(self._request("GET", "/jobs/stats/overview"))

    # ── recommendations ──────────────────────────────────────────────────

    def list_recommendations(self, filters: Mapping[str, Any] | None = None) -> list[Recommendation]:
        data = self._request("GET", "/recommendations", params=filters)
        return [Recommendation.from_api(item) for item in data or []]

    def create_recommendation(
        self,
        job_id: str,
        candidate: Candidate,
        notes: str,
        status: str = DRAFT,
    ) -> Recommendation:
        payload = {
            "jobId": job_id,
            "candidate": candidate.to_dict(),
            "recruiterNotes": notes,
            "status": status,
        }
        data = self._request("POST", "/recommendations", payload=payload, expect_object=True)
        return Recommendation.from_api(data)

    def submit_recommendation(self, rec_id: str) -> Recommendation:
        data = self._request("POST", f"/recommendations/{rec_id}/submit", expect_object=True)
        return Recommendation.from_api(data)

    def add_feedback(self, rec_id: str, feedback: Mapping[str, str]) -> Recommendation:
        payload = {"feedback": feedback.get("feedback", ""), "status": feedback.get("status", "")}
        return Recommendation.from_api(
            self._request(
                "POST", f"/recommendations/{rec_id}/feedback", payload=payload, expect_object=True
            )
        )
