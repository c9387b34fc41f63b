"""Company views: dashboard, post-job form, incoming recommendations."""
from __future__ import annotations

from collections import Counter

from portal.api import PortalClient
from portal.errors import ValidationError
from portal.log import get_logger
from portal.models import (
    FEEDBACK_STATUSES,
    RECOMMENDATION_STATUSES,
    Job,
    JobDraft,
    Recommendation,
    Stats,
)
from portal.views.base import ERROR, Notice, View, require

log = get_logger(__name__)

JOB_LABELS: dict[str, str] = {
    "title": "Job Title",
    "department": "Department",
    "level": "Level",
    "location": "Location",
    "remote": "Remote",
    "description": "Description",
}


class CompanyDashboard(View):
    route = "/company/dashboard"
    title = "Company Dashboard"

    def __init__(self, *args, preview: int = 5, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.preview = preview
        self.stats = Stats()
        self.jobs: list[Job] = []

    def fetch(self):
        return self.parallel(PortalClient.get_job_stats, PortalClient.list_jobs)

    def apply(self, result) -> None:
        self.stats, jobs = result
        self.jobs = jobs[: self.preview]


class PostJobForm(View):
    route = "/company/jobs/new"
    title = "Post New Job"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.draft = JobDraft()
        self.saving = False

    def submit(self) -> bool:
        try:
            require(self.draft, JobDraft.REQUIRED, JOB_LABELS)
        except ValidationError as exc:
            self.alert = Notice(ERROR, exc.message)
            return False

        self.saving = True
        try:
            return self.mutate(
                lambda: self.client.create_job(self.draft),
                success="Job posted successfully!",
                failure="Error posting job",
                then=lambda _job: setattr(self, "navigate_to", "/company/dashboard"),
            )
        finally:
            self.saving = False


class CompanyRecommendations(View):
    route = "/company/recommendations"
    title = "Candidate Recommendations"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.recommendations: list[Recommendation] = []

    def fetch(self):
        return self.client.list_recommendations()

    def apply(self, result) -> None:
        self.recommendations = result

    def add_feedback(self, rec_id: str, feedback: str, status: str) -> bool:
        """Leave feedback. A blank answer is treated as a cancelled prompt."""
        feedback, status = (feedback or "").strip(), (status or "").strip().lower()
        if not feedback or not status:
            return False
        if status not in FEEDBACK_STATUSES:
            self.alert = Notice(ERROR, f"Status must be one of: {', '.join(FEEDBACK_STATUSES)}")
            return False
        return self.mutate(
            lambda: self.client.add_feedback(rec_id, {"feedback": feedback, "status": status}),
            success="Feedback added successfully!",
            failure="Error adding feedback",
            then=lambda _rec: self.refresh(),
        )

    def status_overview(self) -> dict[str, int]:
        """Recommendation count per status, in pipeline order."""
        counts = Counter(r.status for r in self.recommendations)
        return {s: counts.get(s, 0) for s in RECOMMENDATION_STATUSES if counts.get(s)}
