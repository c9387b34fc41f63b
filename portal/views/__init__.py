from .base import Notice, View, run_parallel
from .company import CompanyDashboard, CompanyRecommendations, PostJobForm
from .login import DEMO_ACCOUNTS, LoginView
from .recruiter import RecommendForm, RecruiterDashboard, RecruiterJobsList, RecruiterRecommendations

from portal.api import PortalClient
from portal.config import Settings
from portal.log import get_logger
from portal.session import SessionStore

log = get_logger(__name__)

__all__ = [
    "View", "Notice", "run_parallel", "DEMO_ACCOUNTS",
    "LoginView", "RecruiterDashboard", "RecruiterJobsList", "RecommendForm",
    "RecruiterRecommendations", "CompanyDashboard", "PostJobForm",
    "CompanyRecommendations", "VIEWS", "make_view",
]

# route name (see portal.auth.ROUTES) -> controller
VIEWS: dict[str, type[View]] = {
    "login": LoginView,
    "recruiter_dashboard": RecruiterDashboard,
    "recruiter_jobs": RecruiterJobsList,
    "recruiter_recommend": RecommendForm,
    "recruiter_recommendations": RecruiterRecommendations,
    "company_dashboard": CompanyDashboard,
    "company_post_job": PostJobForm,
    "company_recommendations": CompanyRecommendations,
}

_PREVIEW_VIEWS = (RecruiterDashboard, CompanyDashboard)


def make_view(
    name: str,
    client: PortalClient,
    store: SessionStore,
    settings: Settings,
    **params: str,
) -> View:
    cls = VIEWS[name]
    kwargs: dict = {"max_workers": settings.max_workers}
    if cls in _PREVIEW_VIEWS:
        kwargs["preview"] = settings.dashboard_preview
    kwargs.update(params)
    log.debug("Creating view %s %s", cls.__name__, params or "")
    return cls(client, store, **kwargs)
