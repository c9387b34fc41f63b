"""Recruiter views: dashboard, open jobs, recommend form, own recommendations."""
from __future__ import annotations

from portal.api import PortalClient
from portal.errors import ValidationError
from portal.log import get_logger
from portal.models import DRAFT, SUBMITTED, Job, Recommendation, RecommendationDraft, Stats
from portal.views.base import ERROR, Notice, View, require

log = get_logger(__name__)

OPEN_JOBS = {"status": "open"}

CANDIDATE_LABELS: dict[str, str] = {
    "name": "Full Name",
    "email": "Email",
    "current_role": "Current Role",
    "recruiter_notes": "Your Notes",
}


class RecruiterDashboard(View):
    route = "/recruiter/dashboard"
    title = "Recruiter Dashboard"

    def __init__(self, *args, preview: int = 5, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.preview = preview
        self.stats = Stats()
        self.jobs: list[Job] = []

    def fetch(self):
        return self.parallel(PortalClient.get_job_stats, lambda api: api.list_jobs(OPEN_JOBS))

    def apply(self, result) -> None:
        self.stats, jobs = result
        self.jobs = jobs[: self.preview]


class RecruiterJobsList(View):
    route = "/recruiter/jobs"
    title = "All Open Positions"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.jobs: list[Job] = []
        self.search_term = ""

    def fetch(self):
        return self.client.list_jobs(OPEN_JOBS)

    def apply(self, result) -> None:
        self.jobs = result

    @property
    def visible_jobs(self) -> list[Job]:
        term = self.search_term.strip().lower()
        if not term:
            return list(self.jobs)
        return [
            j for j in self.jobs
            if term in j.title.lower() or term in j.company_name.lower()
        ]


class RecommendForm(View):
    route = "/recruiter/recommend/<job_id>"
    title = "Recommend Candidate"

    def __init__(self, *args, job_id: str, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.job_id = job_id
        self.job: Job | None = None
        self.draft = RecommendationDraft()
        self.saving = False

    def fetch(self):
        return self.client.get_job(self.job_id)

    def apply(self, result) -> None:
        self.job = result

    def submit(self) -> bool:
        draft = self.draft
        try:
            require(draft, RecommendationDraft.REQUIRED, CANDIDATE_LABELS)
            if draft.status not in (DRAFT, SUBMITTED):
                raise ValidationError(f"Status must be '{DRAFT}' or '{SUBMITTED}'")
        except ValidationError as exc:
            self.alert = Notice(ERROR, exc.message)
            return False

        self.saving = True
        try:
            return self.mutate(
                lambda: self.client.create_recommendation(
                    self.job_id, draft.candidate(), draft.recruiter_notes, draft.status
                ),
                success="Recommendation created successfully!",
                failure="Error creating recommendation",
                then=lambda _rec: setattr(self, "navigate_to", "/recruiter/recommendations"),
            )
        finally:
            self.saving = False


class RecruiterRecommendations(View):
    route = "/recruiter/recommendations"
    title = "My Recommendations"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.recommendations: list[Recommendation] = []

    def fetch(self):
        return self.client.list_recommendations()

    def apply(self, result) -> None:
        self.recommendations = result

    def submit(self, rec_id: str, confirmed: bool = True) -> bool:
        """Send a draft to the company. Nothing happens unless the user confirmed."""
        if not confirmed:
            return False
        return self.mutate(
            lambda: self.client.submit_recommendation(rec_id),
            success="Recommendation submitted successfully!",
            failure="Error submitting recommendation",
            then=lambda _rec: self.refresh(),
        )
