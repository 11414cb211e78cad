from __future__ import annotations

from datetime import date

import pandas as pd
import streamlit as st

from inspection.config import settings
from inspection.infra.logger import init_logging
from inspection.infra.session_store import SessionStore
from inspection.services.admin_service import add_jurisdiction_token
from inspection.services.app_services import build_services
from inspection.services.auth_service import TAB_ADMIN, TAB_DASHBOARD, TAB_HOME, TAB_TASKS, SessionContext


st.set_page_config(page_title="Site Inspection & Monitoring", page_icon="💧", layout="wide")

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
TAB_TITLES = {TAB_HOME: "Sites", TAB_TASKS: "Tasks", TAB_DASHBOARD: "Stats", TAB_ADMIN: "Admin"}
LEVELS = ["SDO", "EE", "SE", "CE", "AEE", "JE", "ADMIN"]


@st.cache_resource
def _services():
    init_logging(settings)
    return build_services(session_store=SessionStore())


services = _services()

if "ctx" not in st.session_state:
    st.session_state["ctx"] = services.auth.restore()

ctx: SessionContext | None = st.session_state["ctx"]

st.title("Official Inspection & Monitoring System")
if services.repo.error:
    st.caption(f"Offline data in use ({services.repo.error})")
for level, text in st.session_state.pop("flash", []):
    getattr(st, level)(text)


def _flash_and_rerun(result) -> None:
    # Messages survive the rerun so the refreshed task list can show them.
    st.session_state["flash"] = [("success", result.message)] + ([("warning", result.notice)] if result.notice else [])
    st.rerun()


def _login_view() -> None:
    st.subheader("Inspection Login")
    search = st.text_input("Search officer...")
    roster = services.auth.login_roster(search)
    if not roster:
        st.info("No officers match.")
        return
    labels = {f"{o.name} ({o.designation})": o.id for o in roster}
    choice = st.selectbox("Officer", list(labels))
    password = st.text_input("Password", type="password")
    if st.button("Sign in", type="primary"):
        res = services.auth.sign_in(officer_id=labels[choice], password=password)
        if res.ok and res.data:
            st.session_state["ctx"] = res.data["context"]
            st.rerun()
        else:
            st.error(res.message)


def _sites_tab(ctx: SessionContext) -> None:
    search = st.text_input("Search sites or districts")
    sites = services.workflow.visible_sites(ctx, search)
    if not sites:
        st.info("No sites in your jurisdiction match.")
        return
    st.dataframe(pd.DataFrame([s.to_row() for s in sites]), use_container_width=True)

    site_name = st.selectbox("Site", [s.name for s in sites])
    history = services.workflow.site_history(site_name)
    st.markdown("#### Inspection History")
    if history:
        st.dataframe(pd.DataFrame([r.to_row() for r in history]), use_container_width=True)
    else:
        st.caption("No inspections yet.")

    if ctx.is_admin:
        return
    remarks = st.text_area("Observation remarks", key=f"obs-{site_name}")
    if st.button("Submit Observation", type="primary"):
        try:
            result = services.workflow.submit_observation(ctx, site_name, remarks)
        except (ValueError, PermissionError) as exc:
            st.error(str(exc))
            return
        _flash_and_rerun(result)


def _tasks_tab(ctx: SessionContext) -> None:
    st.subheader("Pending Actions")
    tasks = services.workflow.pending_tasks(ctx)
    for report in tasks:
        with st.container(border=True):
            st.markdown(f"**{report.site}** · {report.status.value}")
            st.caption(f"Observation by {report.inspector_role}: \"{report.remarks}\"")
            result = None
            try:
                if ctx.officer.level == "SDO":
                    note = st.text_area("Compliance details", key=f"comp-{report.id}")
                    if st.button("Submit Compliance", key=f"comply-{report.id}"):
                        result = services.workflow.submit_compliance(ctx, report.id, note)
                elif st.button("Verify & Approve", key=f"approve-{report.id}"):
                    result = services.workflow.approve(ctx, report.id)
            except (ValueError, PermissionError) as exc:
                st.error(str(exc))
            if result is not None:
                _flash_and_rerun(result)
    st.caption("No further pending tasks.")


def _dashboard_tab(ctx: SessionContext) -> None:
    today = date.today()
    col_year, col_month = st.columns(2)
    year = col_year.number_input("Year", min_value=2000, max_value=2100, value=today.year, step=1)
    month_name = col_month.selectbox("Month", MONTHS, index=today.month - 1)
    data = services.metrics.dashboard(ctx, int(year), MONTHS.index(month_name) + 1)

    c1, c2, c3 = st.columns(3)
    c1.metric("Inspections", data["summary"]["inspections"])
    c2.metric("Active Sites", data["summary"]["active_sites"])
    c3.metric("Pending", data["summary"]["pending"])

    if not data["summary"]["inspections"]:
        st.caption("No inspections recorded for this period.")
    if data["officers"]:
        df = pd.DataFrame(data["officers"])
        st.dataframe(
            df[["name", "designation", "level", "visits", "target_label", "percentage", "color"]],
            use_container_width=True,
        )
    st.caption("Norms Reference: SE 3-4 · EE 3-5 · SDE/AEE 33% of sites · JE 100% of sites")


def _admin_tab(ctx: SessionContext) -> None:
    st.subheader("User Management")
    officers = services.repo.list_officers()
    editing_label = st.selectbox("Edit existing officer", ["(new officer)"] + [o.name for o in officers])
    editing = next((o for o in officers if o.name == editing_label), None)

    choices = services.admin.jurisdiction_choices()
    if "jurisdiction_input" not in st.session_state or st.session_state.get("editing") != editing_label:
        st.session_state["jurisdiction_input"] = (editing.jurisdiction or "") if editing else ""
        st.session_state["editing"] = editing_label
    pick = st.selectbox("Add location", [""] + choices["sub_divisions"] + choices["locations"])
    if st.button("Add to jurisdiction") and pick:
        st.session_state["jurisdiction_input"] = add_jurisdiction_token(st.session_state["jurisdiction_input"], pick)

    with st.form("officer"):
        fields = {
            "name": st.text_input("Name", value=editing.name if editing else ""),
            "designation": st.text_input("Designation", value=editing.designation if editing else ""),
            "office": st.text_input("Office", value=editing.office if editing else ""),
            "level": st.selectbox(
                "Level",
                LEVELS,
                index=LEVELS.index(editing.level) if editing and editing.level in LEVELS else 0,
            ),
            "password": st.text_input("Password", value=editing.password if editing else ""),
            "jurisdiction": st.text_input("Jurisdiction", key="jurisdiction_input"),
        }
        if st.form_submit_button("Save"):
            try:
                if editing:
                    result = services.admin.update_officer(ctx, editing.id, fields)
                else:
                    result = services.admin.add_officer(ctx, fields)
            except (ValueError, PermissionError) as exc:
                st.error(str(exc))
            else:
                st.success(result.message)
                if result.notice:
                    st.warning(result.notice)

    pending = services.outbox.pending()
    st.markdown(f"#### Unsent store writes: {len(pending)}")
    if pending and st.button("Retry unsent writes"):
        st.write(services.outbox.replay_pending())


if ctx is None:
    _login_view()
else:
    with st.sidebar:
        st.markdown(f"**{ctx.officer.name}**")
        st.caption(f"{ctx.officer.designation} · {ctx.officer.level}")
        if ctx.offline:
            st.warning("Offline mode: changes are kept locally.")
        if st.button("Log out"):
            services.auth.sign_out()
            st.session_state["ctx"] = None
            st.rerun()

    renderers = {
        TAB_HOME: _sites_tab,
        TAB_TASKS: _tasks_tab,
        TAB_DASHBOARD: _dashboard_tab,
        TAB_ADMIN: _admin_tab,
    }
    tab_keys = ctx.available_tabs()
    # Land on the admin view for administrators.
    tab_keys.sort(key=lambda t: t != ctx.landing_tab())
    for key, tab in zip(tab_keys, st.tabs([TAB_TITLES[k] for k in tab_keys])):
        with tab:
            renderers[key](ctx)
