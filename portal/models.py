"""Data models for users, jobs, recommendations and the stored session."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

RECRUITER = "recruiter"
COMPANY = "company"
ROLES: tuple[str, ...] = (RECRUITER, COMPANY)

LEVELS: tuple[str, ...] = ("Junior", "Mid", "Senior", "Lead")
REMOTE_MODES: tuple[str, ...] = ("On-site", "Remote", "Hybrid")
DEPARTMENTS: tuple[str, ...] = ("Engineering", "Product", "Marketing", "Sales")
PRIORITIES: tuple[str, ...] = ("normal", "urgent")
CURRENCIES: dict[str, str] = {"USD": "$", "EUR": "€", "GBP": "£", "AED": "د.إ"}

DRAFT = "draft"
SUBMITTED = "submitted"
RECOMMENDATION_STATUSES: tuple[str, ...] = (
    DRAFT, SUBMITTED, "reviewed", "shortlisted", "interviewing", "offered", "rejected",
)
# Statuses a company may set when leaving feedback
FEEDBACK_STATUSES: tuple[str, ...] = RECOMMENDATION_STATUSES[2:]


def _ref_id(value: Any) -> str:
    """Backend references arrive either as an id string or a populated object."""
    if isinstance(value, dict):
        return str(value.get("_id") or value.get("id") or "")
    return str(value or "")


def _to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class User:
    id: str
    role: str
    email: str
    name: str = ""
    company: str | None = None
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict) -> User:
        return cls(
            id=_ref_id(data),
            role=str(data.get("role", "")),
            email=str(data.get("email", "")),
            name=str(data.get("name", "")),
            company=_ref_id(data.get("company")) or None,
            raw=dict(data),
        )

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.raw)
        data.update({"_id": self.id, "role": self.role, "email": self.email})
        if self.name:
            data["name"] = self.name
        if self.company and not data.get("company"):
            data["company"] = self.company
        return data


@dataclass
class Session:
    token: str
    user: User

    @property
    def role(self) -> str:
        return self.user.role


@dataclass
class SalaryRange:
    min: int
    max: int
    currency: str = "USD"

    @classmethod
    def from_api(cls, data: dict | None) -> SalaryRange | None:
        if not data:
            return None
        low, high = _to_int(data.get("min")), _to_int(data.get("max"))
        if low is None or high is None:
            return None
        return cls(min=low, max=high, currency=str(data.get("currency") or "USD"))

    def to_dict(self) -> dict[str, Any]:
        return {"min": self.min, "max": self.max, "currency": self.currency}

    def label(self) -> str:
        return f"{self.currency} {self.min:,} - {self.max:,}"


@dataclass
class CompanyRef:
    id: str
    name: str = ""

    @classmethod
    def from_api(cls, value: Any) -> CompanyRef | None:
        if not value:
            return None
        name = value.get("name", "") if isinstance(value, dict) else ""
        return cls(id=_ref_id(value), name=str(name))


@dataclass
class Job:
    id: str
    title: str
    department: str = ""
    level: str = ""
    location: str = ""
    remote: str = ""
    description: str = ""
    skills: list[str] = field(default_factory=list)
    priority: str = "normal"
    salary_range: SalaryRange | None = None
    status: str = "open"
    company: CompanyRef | None = None
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict) -> Job:
        return cls(
            id=_ref_id(data),
            title=str(data.get("title", "")),
            department=str(data.get("department", "")),
            level=str(data.get("level", "")),
            location=str(data.get("location", "")),
            remote=str(data.get("remote", "")),
            description=str(data.get("description", "")),
            skills=[str(s) for s in data.get("skills") or []],
            priority=str(data.get("priority") or "normal"),
            salary_range=SalaryRange.from_api(data.get("salaryRange")),
            status=str(data.get("status") or "open"),
            company=CompanyRef.from_api(data.get("company")),
            raw=dict(data),
        )

    @property
    def company_name(self) -> str:
        return self.company.name if self.company else ""

    @property
    def is_urgent(self) -> bool:
        return self.priority == "urgent"


@dataclass
class JobDraft:
    """Form-side record for the post-job view."""

    title: str = ""
    department: str = "Engineering"
    level: str = "Mid"
    location: str = ""
    remote: str = "Hybrid"
    description: str = ""
    skills: str = ""
    priority: str = "normal"
    salary_min: str = ""
    salary_max: str = ""
    salary_currency: str = "USD"

    REQUIRED = ("title", "department", "level", "location", "remote", "description")

    def skill_list(self) -> list[str]:
        return [s.strip() for s in self.skills.split(",") if s.strip()]

    def salary_range(self) -> SalaryRange | None:
        low, high = _to_int(self.salary_min), _to_int(self.salary_max)
        if low is None or high is None:
            return None
        return SalaryRange(min=low, max=high, currency=self.salary_currency)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "title": self.title,
            "department": self.department,
            "level": self.level,
            "location": self.location,
            "remote": self.remote,
            "description": self.description,
            "skills": self.skill_list(),
            "priority": self.priority,
        }
        salary = self.salary_range()
        if salary is not None:
            payload["salaryRange"] = salary.to_dict()
        return payload


@dataclass
class Candidate:
    name: str
    email: str
    phone: str = ""
    current_role: str = ""
    current_company: str = ""
    linkedin_url: str = ""
    years_of_experience: int | None = None

    @classmethod
    def from_api(cls, data: dict | None) -> Candidate:
        data = data or {}
        return cls(
            name=str(data.get("name", "")),
            email=str(data.get("email", "")),
            phone=str(data.get("phone") or ""),
            current_role=str(data.get("currentRole") or ""),
            current_company=str(data.get("currentCompany") or ""),
            linkedin_url=str(data.get("linkedinUrl") or ""),
            years_of_experience=_to_int(data.get("yearsOfExperience")),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "currentRole": self.current_role,
            "currentCompany": self.current_company,
            "linkedinUrl": self.linkedin_url,
        }
        if self.years_of_experience is not None:
            data["yearsOfExperience"] = self.years_of_experience
        return data


@dataclass
class RecommendationDraft:
    """Form-side record for the recommend-candidate view."""

    name: str = ""
    email: str = ""
    phone: str = ""
    current_role: str = ""
    current_company: str = ""
    linkedin_url: str = ""
    years_of_experience: str = ""
    recruiter_notes: str = ""
    status: str = DRAFT

    REQUIRED = ("name", "email", "current_role", "recruiter_notes")

    def candidate(self) -> Candidate:
        return Candidate(
            name=self.name,
            email=self.email,
            phone=self.phone,
            current_role=self.current_role,
            current_company=self.current_company,
            linkedin_url=self.linkedin_url,
            years_of_experience=_to_int(self.years_of_experience),
        )


@dataclass
class JobRef:
    id: str
    title: str = ""
    company_name: str = ""

    @classmethod
    def from_api(cls, value: Any) -> JobRef | None:
        if not value:
            return None
        if not isinstance(value, dict):
            return cls(id=str(value))
        company = CompanyRef.from_api(value.get("company"))
        return cls(
            id=_ref_id(value),
            title=str(value.get("title", "")),
            company_name=company.name if company else "",
        )


@dataclass
class Recommendation:
    id: str
    candidate: Candidate
    status: str = DRAFT
    recruiter_notes: str = ""
    company_feedback: str | None = None
    job: JobRef | None = None
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict) -> Recommendation:
        return cls(
            id=_ref_id(data),
            candidate=Candidate.from_api(data.get("candidate")),
            status=str(data.get("status") or DRAFT),
            recruiter_notes=str(data.get("recruiterNotes") or ""),
            company_feedback=data.get("companyFeedback") or None,
            job=JobRef.from_api(data.get("job") or data.get("jobId")),
            raw=dict(data),
        )

    @property
    def can_submit(self) -> bool:
        return self.status == DRAFT

    @property
    def can_add_feedback(self) -> bool:
        return not self.company_feedback


@dataclass
class Stats:
    open_jobs: int = 0
    total_companies: int = 0
    urgent_jobs: int = 0

    @classmethod
    def from_api(cls, data: dict | None) -> Stats:
        data = data or {}
        return cls(
            open_jobs=_to_int(data.get("openJobs")) or 0,
            total_companies=_to_int(data.get("totalCompanies")) or 0,
            urgent_jobs=_to_int(data.get("urgentJobs")) or 0,
        )
