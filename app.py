"""Streamlit UI for the VC Portfolio talent portal."""
from __future__ import annotations

import sys
import uuid
from pathlib import Path

import pandas as pd
import streamlit as st

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from portal.api import PortalClient
from portal.auth import (
    LOGIN_ROUTE,
    ROUTES,
    ROUTES_BY_NAME,
    Auth,
    Redirect,
    dashboard_for,
    find_route,
    nav_links,
    resolve,
)
from portal.config import SESSION_DIR, Settings, ensure_dirs, load_settings
from portal.log import get_logger
from portal.models import (
    CURRENCIES,
    DEPARTMENTS,
    DRAFT,
    FEEDBACK_STATUSES,
    LEVELS,
    PRIORITIES,
    REMOTE_MODES,
    SUBMITTED,
    Job,
)
from portal.session import SessionStore, make_store
from portal.views import DEMO_ACCOUNTS, View, make_view
from portal.views.base import SUCCESS

log = get_logger(__name__)

_CSS = """
<style>
.badge { padding: 0.1rem 0.55rem; border-radius: 10px; font-size: 0.8rem; font-weight: 600; }
.badge-urgent { background: #fdecea; color: #c0392b; }
.badge-draft { background: #eceff1; color: #455a64; }
.badge-submitted, .badge-open { background: #e3f2fd; color: #1565c0; }
.badge-reviewed, .badge-shortlisted, .badge-interviewing { background: #fff8e1; color: #8d6e00; }
.badge-offered { background: #e8f5e9; color: #2e7d32; }
.badge-rejected, .badge-closed { background: #fdecea; color: #c0392b; }
.company-name { color: #5c6bc0; margin-top: -0.6rem; }
</style>
"""

# ── Resources ────────────────────────────────────────────────────────────


@st.cache_resource
def _settings() -> Settings:
    ensure_dirs()
    return load_settings()


def _store() -> SessionStore:
    """Session store for this browser session; never shared between visitors."""
    if "_store" not in st.session_state:
        backend = _settings().session_storage
        if "_browser_id" not in st.session_state:
            st.session_state["_browser_id"] = uuid.uuid4().hex
        directory = SESSION_DIR / st.session_state["_browser_id"]
        st.session_state["_store"] = make_store(backend, directory, backing=st.session_state)
    return st.session_state["_store"]


def _client() -> PortalClient:
    if "_client" not in st.session_state:
        settings = _settings()
        st.session_state["_client"] = PortalClient(
            settings.api_url,
            token_provider=_store().get_token,
            timeout=settings.request_timeout,
        )
    return st.session_state["_client"]


# ── Navigation ───────────────────────────────────────────────────────────


def _go(path: str) -> None:
    """Switch to the page serving ``path``; parameters ride in session state."""
    found = find_route(path) or find_route(LOGIN_ROUTE)
    st.session_state["_route_params"] = dict(found.params)
    st.switch_page(PAGES[found.route.name])


def _view(name: str, **params: str) -> View:
    """Return the mounted controller for this page, replacing the previous one."""
    key = (name, tuple(sorted(params.items())))
    active: View | None = st.session_state.get("_active_view")
    if active is not None and st.session_state.get("_active_key") == key and active.mounted:
        return active
    if active is not None:
        active.unmount()
    view = make_view(name, _client(), _store(), _settings(), **params)
    st.session_state["_active_view"] = view
    st.session_state["_active_key"] = key
    with st.spinner("Loading..."):
        view.mount()
    return view


def _guard(name: str) -> dict[str, str]:
    """Apply the route guard; redirects never return."""
    route = ROUTES_BY_NAME[name]
    params = dict(st.session_state.get("_route_params") or {})
    if "<job_id>" in route.pattern:
        job_id = params.get("job_id") or st.query_params.get("job", "")
        if not job_id:
            _go(LOGIN_ROUTE if _store().get_session() is None else "/recruiter/jobs")
        params = {"job_id": job_id}
    else:
        params = {}
    decision = resolve(route.build(**params), _store().get_session())
    if isinstance(decision, Redirect):
        _go(decision.target)
    return params


@st.dialog("Notice")
def _alert_dialog(view: View) -> None:
    notice = view.alert
    if notice is None:
        st.rerun()
        return
    if notice.kind == SUCCESS:
        st.success(notice.message)
    else:
        st.error(notice.message)
    if st.button("OK", type="primary", use_container_width=True):
        view.acknowledge()
        st.rerun()


def _settle(view: View) -> None:
    """Show pending notices first, then follow any navigation the view asked for."""
    if view.alert is not None:
        _alert_dialog(view)
        return
    target = view.take_navigation()
    if target:
        _go(target)


def _badge(status: str) -> str:
    return f'<span class="badge badge-{status}">{status}</span>'


def _loading_or_error(view: View) -> bool:
    if view.loading:
        st.info("Loading...")
        return True
    if view.error:
        st.error(view.error)
        if st.button("Retry", key=f"reload_{view.route}"):
            view.refresh()
            st.rerun()
        return True
    return False


def _job_card(job: Job, *, recommend: bool, show_company: bool = True, key: str = "") -> None:
    with st.container(border=True):
        head, badge = st.columns([5, 1])
        with head:
            st.markdown(f"### {job.title}")
            if show_company and job.company_name:
                st.markdown(f'<p class="company-name">{job.company_name}</p>', unsafe_allow_html=True)
            elif not show_company:
                st.caption(f"{job.department} • {job.level}")
        with badge:
            if show_company and job.is_urgent:
                st.markdown('<span class="badge badge-urgent">Urgent</span>', unsafe_allow_html=True)
            elif not show_company:
                st.markdown(_badge(job.status), unsafe_allow_html=True)
        if job.description:
            st.write(job.description)
        meta = [f"📍 {job.location}", f"💼 {job.level}", f"🏢 {job.department}"] if show_company else []
        if job.salary_range:
            meta.append(f"💰 {job.salary_range.label()}")
        if meta:
            st.caption("  ·  ".join(m for m in meta if m.strip()))
        if recommend and st.button("Recommend Candidate", key=f"rec_{key}_{job.id}", type="primary"):
            _go(ROUTES_BY_NAME["recruiter_recommend"].build(job_id=job.id))


# ── Page: Login ──────────────────────────────────────────────────────────


def page_login() -> None:
    view = _view("login")
    st.header(view.title)
    st.write("Connecting talent with portfolio companies")

    session = _store().get_session()
    if session is not None:
        st.info(f"Signed in as **{session.user.email}** ({session.role}).")
        if st.button("Go to dashboard", type="primary"):
            _go(dashboard_for(session.role))

    if view.error:
        st.error(view.error)

    with st.form("login"):
        email = st.text_input("Email", value=view.email, placeholder="your@email.com")
        password = st.text_input("Password", type="password", placeholder="••••••••")
        submitted = st.form_submit_button("Login", type="primary", use_container_width=True)

    if submitted:
        with st.spinner("Logging in..."):
            ok = view.submit(email, password)
        if ok:
            _settle(view)
        else:
            st.rerun()

    with st.expander("Demo Accounts", expanded=True):
        for label, demo_email, demo_password in DEMO_ACCOUNTS:
            st.markdown(f"**{label}:** `{demo_email}` / `{demo_password}`")


# ── Pages: Recruiter ─────────────────────────────────────────────────────


def page_recruiter_dashboard() -> None:
    _guard("recruiter_dashboard")
    view = _view("recruiter_dashboard")
    st.header(view.title)
    if _loading_or_error(view):
        return

    c1, c2, c3 = st.columns(3)
    c1.metric("Open Positions", view.stats.open_jobs)
    c2.metric("Portfolio Companies", view.stats.total_companies)
    c3.metric("Urgent Roles", view.stats.urgent_jobs)

    st.divider()
    head, action = st.columns([4, 1])
    head.subheader("Recent Open Positions")
    if action.button("View All Jobs"):
        _go("/recruiter/jobs")
    if not view.jobs:
        st.info("No open positions right now.")
    for job in view.jobs:
        _job_card(job, recommend=True, key="dash")
    _settle(view)


def page_recruiter_jobs() -> None:
    _guard("recruiter_jobs")
    view = _view("recruiter_jobs")
    st.header(view.title)
    if _loading_or_error(view):
        return

    view.search_term = st.text_input("Search jobs...", value=view.search_term, placeholder="Title or company")
    jobs = view.visible_jobs
    if not jobs:
        st.info("No matching positions.")
    for job in jobs:
        _job_card(job, recommend=True, key="list")
    _settle(view)


def page_recruiter_recommend() -> None:
    params = _guard("recruiter_recommend")
    view = _view("recruiter_recommend", **params)
    st.header(view.title)
    if _loading_or_error(view) or view.job is None:
        _settle(view)
        return

    job = view.job
    with st.container(border=True):
        st.markdown(f"### {job.title}")
        st.write(" • ".join(p for p in (job.company_name, job.location) if p))
        if job.salary_range:
            st.write(f"💰 {job.salary_range.label()}")

    draft = view.draft
    with st.form("recommend"):
        st.subheader("Candidate Information")
        draft.name = st.text_input("Full Name *", value=draft.name)
        draft.email = st.text_input("Email *", value=draft.email)
        draft.phone = st.text_input("Phone", value=draft.phone)
        draft.current_role = st.text_input("Current Role *", value=draft.current_role)
        draft.current_company = st.text_input("Current Company", value=draft.current_company)
        draft.linkedin_url = st.text_input("LinkedIn URL", value=draft.linkedin_url)
        years = st.number_input(
            "Years of Experience", min_value=0, max_value=60, step=1,
            value=int(draft.years_of_experience) if draft.years_of_experience else None,
        )
        draft.years_of_experience = "" if years is None else str(int(years))
        draft.recruiter_notes = st.text_area(
            "Your Notes (Private) *", value=draft.recruiter_notes, height=120,
            placeholder="Why is this candidate a good fit?",
        )
        labels = {DRAFT: "Save as Draft (Private)", SUBMITTED: "Submit to Company"}
        draft.status = st.selectbox(
            "Status", [DRAFT, SUBMITTED],
            index=0 if draft.status == DRAFT else 1,
            format_func=labels.get,
        )
        c1, c2 = st.columns(2)
        cancel = c1.form_submit_button("Cancel", use_container_width=True)
        save = c2.form_submit_button(
            "Saving..." if view.saving else "Create Recommendation",
            type="primary", use_container_width=True,
        )

    if cancel:
        _go("/recruiter/jobs")
    if save:
        view.submit()
    _settle(view)


@st.dialog("Submit recommendation")
def _confirm_submit(view: View, rec_id: str) -> None:
    st.write("Submit this recommendation to the company?")
    c1, c2 = st.columns(2)
    if c1.button("Cancel", use_container_width=True):
        st.rerun()
    if c2.button("Submit", type="primary", use_container_width=True):
        view.submit(rec_id, confirmed=True)
        st.rerun()


def page_recruiter_recommendations() -> None:
    _guard("recruiter_recommendations")
    view = _view("recruiter_recommendations")
    st.header(view.title)
    if _loading_or_error(view):
        return

    if not view.recommendations:
        st.info("No recommendations yet")
    for rec in view.recommendations:
        with st.container(border=True):
            head, badge = st.columns([5, 1])
            head.markdown(f"### {rec.candidate.name}")
            head.caption(rec.candidate.current_role)
            badge.markdown(_badge(rec.status), unsafe_allow_html=True)
            if rec.job:
                at = f" at {rec.job.company_name}" if rec.job.company_name else ""
                st.markdown(f"**For:** {rec.job.title}{at}")
            st.markdown(f"**Your notes:** {rec.recruiter_notes}")
            if rec.can_submit and st.button("Submit to Company", key=f"submit_{rec.id}", type="primary"):
                _confirm_submit(view, rec.id)
            if rec.company_feedback:
                st.info(f"**Company feedback:** {rec.company_feedback}")
    _settle(view)


# ── Pages: Company ───────────────────────────────────────────────────────


def page_company_dashboard() -> None:
    _guard("company_dashboard")
    view = _view("company_dashboard")
    st.header(view.title)
    if _loading_or_error(view):
        return

    c1, c2 = st.columns(2)
    c1.metric("Your Open Jobs", view.stats.open_jobs)
    c2.metric("Urgent Roles", view.stats.urgent_jobs)

    st.divider()
    head, action = st.columns([4, 1])
    head.subheader("Your Job Postings")
    if action.button("Post New Job", type="primary"):
        _go("/company/jobs/new")
    if not view.jobs:
        st.info("No job postings yet.")
    for job in view.jobs:
        _job_card(job, recommend=False, show_company=False, key="company")
    _settle(view)


def page_company_post_job() -> None:
    _guard("company_post_job")
    view = _view("company_post_job")
    st.header(view.title)

    draft = view.draft
    with st.form("post_job"):
        draft.title = st.text_input("Job Title *", value=draft.title, placeholder="e.g., Senior Software Engineer")
        c1, c2 = st.columns(2)
        draft.department = c1.selectbox("Department *", DEPARTMENTS, index=DEPARTMENTS.index(draft.department))
        draft.level = c2.selectbox("Level *", LEVELS, index=LEVELS.index(draft.level))
        c1, c2 = st.columns(2)
        draft.location = c1.text_input("Location *", value=draft.location, placeholder="e.g., San Francisco, CA")
        draft.remote = c2.selectbox("Remote *", REMOTE_MODES, index=REMOTE_MODES.index(draft.remote))
        draft.description = st.text_area("Description *", value=draft.description, height=120)
        draft.skills = st.text_input("Skills (comma-separated)", value=draft.skills, placeholder="e.g., React, Node.js")
        draft.priority = st.selectbox("Priority", PRIORITIES, index=PRIORITIES.index(draft.priority))
        c1, c2, c3 = st.columns(3)
        low = c1.number_input("Min Salary", min_value=0, step=1000, value=int(draft.salary_min) if draft.salary_min else None, placeholder="e.g., 100000")
        high = c2.number_input("Max Salary", min_value=0, step=1000, value=int(draft.salary_max) if draft.salary_max else None, placeholder="e.g., 150000")
        currencies = list(CURRENCIES)
        draft.salary_currency = c3.selectbox(
            "Currency", currencies,
            index=currencies.index(draft.salary_currency),
            format_func=lambda c: f"{c} ({CURRENCIES[c]})",
        )
        draft.salary_min = "" if low is None else str(int(low))
        draft.salary_max = "" if high is None else str(int(high))
        c1, c2 = st.columns(2)
        cancel = c1.form_submit_button("Cancel", use_container_width=True)
        post = c2.form_submit_button(
            "Posting..." if view.saving else "Post Job", type="primary", use_container_width=True
        )

    if cancel:
        _go("/company/dashboard")
    if post:
        view.submit()
    _settle(view)


def page_company_recommendations() -> None:
    _guard("company_recommendations")
    view = _view("company_recommendations")
    st.header(view.title)
    if _loading_or_error(view):
        return

    if not view.recommendations:
        st.info("No recommendations yet")
        _settle(view)
        return

    tab_cards, tab_overview = st.tabs(["Candidates", "Pipeline Overview"])

    with tab_cards:
        for rec in view.recommendations:
            with st.container(border=True):
                head, badge = st.columns([5, 1])
                head.markdown(f"### {rec.candidate.name}")
                head.caption(rec.candidate.current_role)
                badge.markdown(_badge(rec.status), unsafe_allow_html=True)
                if rec.job:
                    st.markdown(f"**For:** {rec.job.title}")
                st.markdown(f"**Email:** {rec.candidate.email}")
                if rec.can_add_feedback:
                    with st.expander("Add Feedback"):
                        with st.form(f"feedback_{rec.id}"):
                            text = st.text_area("Your feedback")
                            status = st.selectbox("Status", ("",) + FEEDBACK_STATUSES)
                            if st.form_submit_button("Save Feedback", type="primary"):
                                view.add_feedback(rec.id, text, status)
                                st.rerun()
                else:
                    st.info(f"**Your feedback:** {rec.company_feedback}")

    with tab_overview:
        overview = view.status_overview()
        cols = st.columns(max(1, len(overview)))
        for col, (status, count) in zip(cols, overview.items()):
            col.metric(status.title(), count)

        df = pd.DataFrame(
            [
                {
                    "candidate": r.candidate.name,
                    "current_role": r.candidate.current_role,
                    "job": r.job.title if r.job else "",
                    "email": r.candidate.email,
                    "status": r.status,
                    "feedback": r.company_feedback or "",
                }
                for r in view.recommendations
            ]
        )
        st.dataframe(df, use_container_width=True, hide_index=True)
    _settle(view)


# ── Main ─────────────────────────────────────────────────────────────────


def _inject_css() -> None:
    st.markdown(_CSS, unsafe_allow_html=True)


def _sidebar_nav() -> None:
    session = _store().get_session()
    if session is None:
        return
    with st.sidebar:
        st.markdown("## VC Platform")
        st.caption(f"{session.user.email} · {session.role}")
        for route in nav_links(session):
            st.page_link(PAGES[route.name], label=route.title)
        st.divider()
        if st.button("Logout", use_container_width=True):
            Auth(_client(), _store()).logout()
            for key in ("_active_view", "_active_key", "_route_params"):
                st.session_state.pop(key, None)
            _go(LOGIN_ROUTE)


def _wrap(page_fn):
    def run() -> None:
        _inject_css()
        _sidebar_nav()
        page_fn()

    run.__name__ = page_fn.__name__
    return run


_PAGE_FUNCS = {
    "login": page_login,
    "recruiter_dashboard": page_recruiter_dashboard,
    "recruiter_jobs": page_recruiter_jobs,
    "recruiter_recommend": page_recruiter_recommend,
    "recruiter_recommendations": page_recruiter_recommendations,
    "company_dashboard": page_company_dashboard,
    "company_post_job": page_company_post_job,
    "company_recommendations": page_company_recommendations,
}

PAGES = {
    route.name: st.Page(
        _wrap(_PAGE_FUNCS[route.name]),
        title=route.title,
        url_path=route.name,
        default=route.pattern == LOGIN_ROUTE,
    )
    for route in ROUTES
}

nav = st.navigation(list(PAGES.values()), position="hidden")
nav.run()
