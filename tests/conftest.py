"""
Test fixtures: an in-memory backend that speaks the portal's REST contract
"""

import json
import threading
from urllib.parse import urlsplit

import pytest

from portal.api import PortalClient
from portal.models import Session, User
from portal.session import MemoryStorage, SessionStore

BASE_URL = "https://api.test/api"


class FakeResponse:
    def __init__(self, status_code, body=None):
        self.status_code = status_code
        self._body = body

    @property
    def content(self):
        return b"" if self._body is None else json.dumps(self._body).encode()

    @property
    def text(self):
        return self.content.decode()

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class FakeBackend:
    """Stands in for requests.Session; routes requests to in-memory data."""

    def __init__(self):
        self.calls = []
        self.before_response = None
        self._lock = threading.Lock()
        self._next_id = 100
        self.companies = {
            "co1": {"_id": "co1", "name": "TechVenture"},
            "co2": {"_id": "co2", "name": "DataWorks"},
        }
        self.users = {
            "recruiter@example.com": (
                "password123",
                {"_id": "u1", "role": "recruiter", "email": "recruiter@example.com", "name": "Riley"},
            ),
            "contact@techventure.com": (
                "password123",
                {"_id": "u2", "role": "company", "email": "contact@techventure.com", "company": "co1"},
            ),
        }
        self.jobs = {
            "j1": {
                "_id": "j1", "title": "Senior Backend Engineer", "department": "Engineering",
                "level": "Senior", "location": "San Francisco, CA", "remote": "Hybrid",
                "description": "Own the API platform.", "skills": ["Python", "Postgres"],
                "priority": "urgent", "status": "open", "company": "co1",
                "salaryRange": {"min": 150000, "max": 190000, "currency": "USD"},
            },
            "j2": {
                "_id": "j2", "title": "Marketing Lead", "department": "Marketing",
                "level": "Lead", "location": "London", "remote": "On-site",
                "description": "Grow the brand.", "skills": [], "priority": "normal",
                "status": "closed", "company": "co1",
            },
            "j3": {
                "_id": "j3", "title": "Product Manager", "department": "Product",
                "level": "Mid", "location": "Remote", "remote": "Remote",
                "description": "Shape the roadmap.", "skills": ["Discovery"],
                "priority": "normal", "status": "open", "company": "co2",
            },
        }
        self.recommendations = {}

    # ── helpers ──────────────────────────────────────────────────────────

    def _new_id(self, prefix):
        self._next_id += 1
        return f"{prefix}{self._next_id}"

    def _user_for(self, headers):
        auth = (headers or {}).get("Authorization", "")
        if not auth.startswith("Bearer tok-"):
            return None
        user_id = auth[len("Bearer tok-"):]
        for _, user in self.users.values():
            if user["_id"] == user_id:
                return user
        return None

    def _job_out(self, job):
        out = dict(job)
        out["company"] = self.companies.get(job["company"], job["company"])
        return out

    def _rec_out(self, rec):
        out = dict(rec)
        job = self.jobs.get(rec["jobId"])
        if job:
            out["job"] = {"_id": job["_id"], "title": job["title"], "company": self.companies[job["company"]]}
        return out

    # ── requests.Session interface ───────────────────────────────────────

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        with self._lock:
            self.calls.append(
                {"method": method, "url": url, "params": params, "json": json, "headers": headers}
            )
        if self.before_response is not None:
            self.before_response(method, url)
        path = urlsplit(url).path
        assert path.startswith("/api"), path
        with self._lock:
            return self._route(method, path[len("/api"):], params or {}, json, headers)

    def _route(self, method, path, params, body, headers):
        parts = [p for p in path.split("/") if p]

        if (method, parts) == ("POST", ["auth", "login"]):
            entry = self.users.get(body.get("email"))
            if entry is None or entry[0] != body.get("password"):
                return FakeResponse(401, {"message": "Invalid credentials"})
            user = entry[1]
            return FakeResponse(200, {"token": f"tok-{user['_id']}", "user": user})

        user = self._user_for(headers)
        if user is None:
            return FakeResponse(401, {"message": "No token, authorization denied"})

        if parts == ["jobs"] and method == "GET":
            jobs = list(self.jobs.values())
            if user["role"] == "company":
                jobs = [j for j in jobs if j["company"] == user["company"]]
            for key, value in params.items():
                jobs = [j for j in jobs if str(j.get(key)) == value]
            return FakeResponse(200, [self._job_out(j) for j in jobs])

        if parts == ["jobs", "stats", "overview"] and method == "GET":
            jobs = list(self.jobs.values())
            if user["role"] == "company":
                jobs = [j for j in jobs if j["company"] == user["company"]]
            open_jobs = [j for j in jobs if j["status"] == "open"]
            return FakeResponse(200, {
                "openJobs": len(open_jobs),
                "totalCompanies": len(self.companies),
                "urgentJobs": sum(1 for j in open_jobs if j["priority"] == "urgent"),
            })

        if len(parts) == 2 and parts[0] == "jobs" and method == "GET":
            job = self.jobs.get(parts[1])
            if job is None:
                return FakeResponse(404, {"message": "Job not found"})
            return FakeResponse(200, self._job_out(job))

        if parts == ["jobs"] and method == "POST":
            if user["role"] != "company":
                return FakeResponse(403, {"message": "Only companies can post jobs"})
            missing = [f for f in ("title", "description", "location") if not body.get(f)]
            if missing:
                return FakeResponse(400, {"message": f"Missing fields: {', '.join(missing)}"})
            job = dict(body, _id=self._new_id("j"), status="open", company=user["company"])
            self.jobs[job["_id"]] = job
            return FakeResponse(201, self._job_out(job))

        if parts == ["recommendations"] and method == "GET":
            recs = list(self.recommendations.values())
            if user["role"] == "recruiter":
                recs = [r for r in recs if r["recruiter"] == user["_id"]]
            else:
                recs = [
                    r for r in recs
                    if r["status"] != "draft" and self.jobs[r["jobId"]]["company"] == user["company"]
                ]
            for key, value in params.items():
                recs = [r for r in recs if str(r.get(key)) == value]
            return FakeResponse(200, [self._rec_out(r) for r in recs])

        if parts == ["recommendations"] and method == "POST":
            if body.get("jobId") not in self.jobs:
                return FakeResponse(404, {"message": "Job not found"})
            rec = {
                "_id": self._new_id("r"),
                "jobId": body["jobId"],
                "candidate": body["candidate"],
                "recruiterNotes": body.get("recruiterNotes", ""),
                "status": body.get("status") or "draft",
                "recruiter": user["_id"],
            }
            self.recommendations[rec["_id"]] = rec
            return FakeResponse(201, self._rec_out(rec))

        if len(parts) == 3 and parts[0] == "recommendations" and method == "POST":
            rec = self.recommendations.get(parts[1])
            if rec is None:
                return FakeResponse(404, {"message": "Recommendation not found"})
            if parts[2] == "submit":
                if rec["status"] != "draft":
                    return FakeResponse(409, {"message": "Only draft recommendations can be submitted"})
                rec["status"] = "submitted"
                return FakeResponse(200, self._rec_out(rec))
            if parts[2] == "feedback":
                rec["companyFeedback"] = body["feedback"]
                rec["status"] = body["status"]
                return FakeResponse(200, self._rec_out(rec))

        return FakeResponse(404, {"message": f"No route for {method} {path}"})


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def store():
    return SessionStore(MemoryStorage())


@pytest.fixture
def client(backend, store):
    return PortalClient(BASE_URL, token_provider=store.get_token, http=backend)


def make_session(role="recruiter"):
    if role == "recruiter":
        user = User(id="u1", role="recruiter", email="recruiter@example.com")
    else:
        user = User(id="u2", role="company", email="contact@techventure.com", company="co1")
    return Session(token=f"tok-{user.id}", user=user)


@pytest.fixture
def recruiter_session(store):
    session = make_session("recruiter")
    store.save(session)
    return session


@pytest.fixture
def company_session(store):
    session = make_session("company")
    store.save(session)
    return session
