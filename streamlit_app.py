import asyncio
from typing import Optional

import pandas as pd
import streamlit as st
from dotenv import load_dotenv

load_dotenv()

from scanner_admin.config import settings
from scanner_admin.gateway import RemoteGateway
from scanner_admin.logging_config import setup_logging
from scanner_admin.models import StatisticsSummary
from scanner_admin.services.mutation_gate import CONFIRMATION_PROMPTS, Action
from scanner_admin.views import (
    JobScanView,
    SettingsView,
    WebsiteForm,
    WebsiteManagementView,
    interval_choices,
    interval_label,
)

# Initialize logging
logger = setup_logging("streamlit_app")

STATUS_CHOICES = {"All": None, "Active": True, "Inactive": False}


@st.cache_resource(show_spinner=False)
def get_gateway() -> RemoteGateway:
    return RemoteGateway(settings.api_base_url)


def run(coro):
    """Drive one view operation to completion from the Streamlit script thread."""
    return asyncio.run(coro)


def _init_state():
    gateway = get_gateway()
    defaults = {
        "website_view": None,
        "job_view": None,
        "settings_view": None,
        "website_form": None,
        "pending_confirmation": None,
        "flash": None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value

    # Views live as long as the browser session; the Streamlit timer replaces the poller's timer
    if st.session_state.website_view is None:
        view = WebsiteManagementView(gateway)
        run(_load_website_view(view))
        st.session_state.website_view = view
    if st.session_state.job_view is None:
        view = JobScanView(gateway)
        run(_load_job_view(view))
        st.session_state.job_view = view
    if st.session_state.settings_view is None:
        view = SettingsView(gateway)
        run(view.load())
        st.session_state.settings_view = view


async def _load_website_view(view: WebsiteManagementView):
    await asyncio.gather(view.refresh(), view.statistics.refresh(), view.poller.poll_now())


async def _load_job_view(view: JobScanView):
    await asyncio.gather(
        view.refresh(), view.load_website_options(), view.statistics.refresh(), view.poller.poll_now()
    )


def render_statistics(summary: Optional[StatisticsSummary], failed_sources=()):
    st.subheader("Statistics Overview")
    if summary is None:
        st.info("Statistics are loading…")
        return
    cols = st.columns(4)
    cols[0].metric("Total Jobs", f"{summary.total_jobs:,}")
    cols[1].metric("Total Websites", f"{summary.total_websites:,}")
    cols[2].metric("Active Websites", f"{summary.active_websites:,}")
    cols[3].metric("Websites with Errors", f"{summary.websites_with_errors:,}")
    caption = summary.caption
    if summary.total_job_documents:
        caption = f"{caption} · {summary.total_job_documents} scan results"
    st.caption(caption)
    if failed_sources:
        st.caption(f"Some statistics could not be loaded: {', '.join(failed_sources)}")


def _flash(outcome):
    if outcome.status == "success":
        st.session_state.flash = ("success", outcome.message or "Done")
    elif outcome.status in ("failed", "blocked"):
        st.session_state.flash = ("error", outcome.message)


def _show_flash():
    flash = st.session_state.flash
    if flash:
        kind, text = flash
        (st.success if kind == "success" else st.error)(text)
        st.session_state.flash = None


def render_website_form(view: WebsiteManagementView):
    form: WebsiteForm = st.session_state.website_form
    st.subheader("Edit Website" if form.is_editing else "Add New Website")
    form.name = st.text_input("Website Name", value=form.name)
    form.url = st.text_input("Website URL", value=form.url)
    form.is_active = st.toggle("Active", value=form.is_active)

    new_keyword = st.text_input("Add keyword", key="form_new_keyword")
    if st.button("Add keyword") and form.add_keyword(new_keyword):
        st.rerun()
    for keyword in form.keywords:
        if st.button(f"✕ {keyword}", key=f"form_kw_{keyword}"):
            form.remove_keyword(keyword)
            st.rerun()

    save_col, cancel_col = st.columns(2)
    if save_col.button("Save", type="primary", disabled=not form.is_valid):
        outcome = run(view.save(form))
        _flash(outcome)
        if outcome.ok:
            st.session_state.website_form = None
        st.rerun()
    if cancel_col.button("Cancel"):
        st.session_state.website_form = None
        st.rerun()


def render_pending_confirmation(view: WebsiteManagementView):
    pending = st.session_state.pending_confirmation
    if not pending:
        return
    action, website_id = pending
    st.warning(CONFIRMATION_PROMPTS[action])
    yes, no = st.columns(2)
    if yes.button("Confirm", type="primary"):
        operation = view.delete if action is Action.DELETE else view.clear_errors
        _flash(run(operation(website_id, confirmer=lambda prompt: True)))
        st.session_state.pending_confirmation = None
        st.rerun()
    if no.button("Cancel", key="cancel_confirmation"):
        st.session_state.pending_confirmation = None
        st.rerun()


@st.fragment(run_every=settings.scan_poll_interval_seconds)
def render_website_list(view: WebsiteManagementView):
    run(view.poller.poll_now())
    caps = view.capabilities
    if view.is_scanning:
        st.info("A scan is running. Editing is disabled until it finishes.")

    if view.error:
        st.error(view.error)
        return
    if view.show_error_banner:
        st.warning("⚠️ Some websites have scanning errors. Check the error details below and consider clearing them once resolved.")
        if st.button("Dismiss warning"):
            view.dismiss_error_banner()
            st.rerun(scope="fragment")

    if view.empty_message:
        st.info(view.empty_message)
        return

    for website in view.websites:
        with st.container(border=True):
            st.markdown(f"**{website.name}** · [{website.url}]({website.href})")
            details = ["Active" if website.is_active else "Inactive", f"{len(website.keywords)} keywords"]
            if website.last_scanned:
                details.append(f"Last scanned: {website.last_scanned:%Y-%m-%d %H:%M}")
            st.caption(" · ".join(details))
            if website.has_error:
                when = f"{website.last_error_at:%Y-%m-%d %H:%M}" if website.last_error_at else "Unknown time"
                st.error(f"Last error ({when}): {website.last_error}")

            cols = st.columns(4)
            if cols[0].button(
                "Deactivate" if website.is_active else "Activate",
                key=f"toggle_{website.id}",
                disabled=not caps.can_toggle_active,
                help=caps.blocked_reason(Action.TOGGLE_ACTIVE),
            ):
                _flash(run(view.toggle_active(website.id)))
                st.rerun()
            if cols[1].button(
                "Edit",
                key=f"edit_{website.id}",
                disabled=not caps.can_edit,
                help=caps.blocked_reason(Action.EDIT),
            ):
                st.session_state.website_form = WebsiteForm.from_website(website)
                st.rerun()
            if website.has_error and cols[2].button(
                "Clear errors",
                key=f"clear_{website.id}",
                disabled=not caps.can_clear_errors,
                help=caps.blocked_reason(Action.CLEAR_ERRORS),
            ):
                st.session_state.pending_confirmation = (Action.CLEAR_ERRORS, website.id)
                st.rerun()
            if cols[3].button(
                "Delete",
                key=f"delete_{website.id}",
                disabled=not caps.can_delete,
                help=caps.blocked_reason(Action.DELETE),
            ):
                st.session_state.pending_confirmation = (Action.DELETE, website.id)
                st.rerun()


def websites_page():
    view: WebsiteManagementView = st.session_state.website_view
    st.title("Website Management")
    _show_flash()
    render_statistics(view.statistics.summary, view.statistics.failed_sources)

    if st.session_state.website_form is not None:
        render_website_form(view)
        return

    render_pending_confirmation(view)

    st.subheader(f"Filter Websites ({view.active_filter_count} active)")
    search = st.text_input("Search websites", value=view.criteria.search, placeholder="Enter website name or URL")
    status = st.selectbox("Status", list(STATUS_CHOICES), index=list(STATUS_CHOICES.values()).index(view.criteria.is_active))
    view.set_search(search)
    view.set_active_filter(STATUS_CHOICES[status])
    col_clear, col_refresh, col_add = st.columns(3)
    if col_clear.button("Clear Filters"):
        view.clear_filters()
        st.rerun()
    if col_refresh.button("Refresh"):
        run(_load_website_view(view))
        st.rerun()
    if col_add.button("Add Website", disabled=not view.capabilities.can_create,
                      help=view.capabilities.blocked_reason(Action.CREATE)):
        st.session_state.website_form = WebsiteForm()
        st.rerun()

    render_website_list(view)


@st.fragment(run_every=settings.scan_poll_interval_seconds)
def render_scan_controls(view: JobScanView):
    run(view.poller.poll_now())
    if view.poller.is_scanning:
        st.info("A scan is running.")

    if st.button("Scan Jobs", type="primary", disabled=not view.can_scan):
        with st.spinner("Scanning..."):
            run(view.scan_jobs())
        # The batch list and statistics live outside this fragment
        st.rerun()
    if view.scan_error:
        st.error(view.scan_error)
    elif view.scan_message:
        st.success(view.scan_message)


def jobs_page():
    view: JobScanView = st.session_state.job_view
    st.title("Job Management")
    render_scan_controls(view)

    render_statistics(view.statistics.summary, view.statistics.failed_sources)

    st.subheader(f"Filter Jobs ({view.active_filter_count} active)")
    search = st.text_input("Search jobs", value=view.criteria.search)
    website_ids = [None] + [w.id for w in view.website_options]
    names = {w.id: w.name for w in view.website_options}
    website_id = st.selectbox(
        "Website",
        website_ids,
        index=website_ids.index(view.criteria.website_id) if view.criteria.website_id in website_ids else 0,
        format_func=lambda wid: "All websites" if wid is None else names.get(wid, wid),
    )
    status = st.selectbox("Website status", list(STATUS_CHOICES), index=list(STATUS_CHOICES.values()).index(view.criteria.is_active))
    view.set_search(search)
    view.set_website_filter(website_id)
    view.set_active_filter(STATUS_CHOICES[status])
    if st.button("Clear Filters"):
        view.clear_filters()
        st.rerun()

    if view.error:
        st.error(view.error)
        return
    if view.empty_message:
        st.info(view.empty_message)
        return
    for batch in view.job_batches:
        count = batch.job_count
        with st.expander(f"{batch.website.name or batch.website.id}: {count} job{'s' if count != 1 else ''} found"):
            if batch.updated_at:
                st.caption(f"Scanned {batch.updated_at:%Y-%m-%d %H:%M}")
            st.dataframe(pd.DataFrame({"Job title": batch.data}), use_container_width=True, hide_index=True)


def settings_page():
    view: SettingsView = st.session_state.settings_view
    st.title("Settings")
    if view.message:
        (st.success if view.message.kind == "success" else st.error)(view.message.text)
        view.dismiss_message()

    st.subheader("Keywords Vocabulary")
    new_keyword = st.text_input("New keyword")
    if st.button("Add") and view.add_keyword(new_keyword):
        st.rerun()
    for keyword in view.keywords:
        if st.button(f"✕ {keyword}", key=f"kw_{keyword}"):
            view.remove_keyword(keyword)
            st.rerun()

    st.subheader("Scan Interval")
    options = interval_choices(view.interval)
    minutes = st.selectbox("Interval", options, index=options.index(view.interval), format_func=interval_label)
    view.select_interval(minutes)

    save_col, reset_col = st.columns(2)
    if save_col.button("Save Settings", type="primary", disabled=view.saving):
        run(view.save())
        st.rerun()
    if reset_col.button("Reset to Defaults"):
        view.reset()
        st.rerun()


def main():
    _init_state()
    page = st.sidebar.radio("Navigate", ["Websites", "Jobs", "Settings"])
    if page == "Websites":
        websites_page()
    elif page == "Jobs":
        jobs_page()
    else:
        settings_page()


if __name__ == "__main__":
    main()
