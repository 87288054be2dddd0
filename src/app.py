"""Main Streamlit application for codetrack.

This module serves as the entry point for the codetrack dashboard: it owns the
sync orchestrator, renders the published usage window and exposes the source,
window and threshold settings.
"""

from datetime import date
from pathlib import Path

import streamlit as st
from streamlit_autorefresh import st_autorefresh

from config import AppConfig
from constants import (
    AUTOREFRESH_KEY,
    DATETIME_FORMAT,
    ERROR_NO_DATA,
    UPDATE_COUNT_KEY,
    WINDOW_LENGTHS,
)
from data.processors import select_display_days, summarize_usage, usage_days_to_dataframe
from sync.orchestrator import SyncOrchestrator, SyncResult
from utils.logging_config import get_logger, log_with_context
from visualizations.chart import show_usage_chart, show_usage_metrics
from visualizations.grid import show_contribution_grid

# Initialize logger
logger = get_logger()

# Initialize config
config = AppConfig.from_env()

# Page configuration
st.set_page_config(page_title="CodeTrack - Coding Activity", layout="wide")


@st.cache_resource
def get_orchestrator() -> SyncOrchestrator:
    """Create the process-wide orchestrator once and start hourly syncing."""
    orchestrator = SyncOrchestrator.from_config(config)
    orchestrator.watch_configuration()
    orchestrator.start_periodic_sync(config.sync_interval)
    log_with_context(logger, "INFO", "codetrack sync started", settings_path=str(config.settings_path))
    return orchestrator


def show_sync_result(result: SyncResult) -> None:
    if result.coalesced:
        st.info("A sync is already running; another pass will follow it.")
    elif result.success:
        st.success(f"Synced {len(result.loaded_sources)} source(s)")
    else:
        st.error(f"Sync failed: {result.error}")

    for source_id, reason in result.skipped_sources.items():
        st.warning(f"Skipped source {source_id}: {reason}")


def wait_and_rerun(orchestrator: SyncOrchestrator) -> None:
    """Wait for the resync a settings change started, then redraw with fresh data."""
    with st.spinner("Syncing..."):
        orchestrator.wait_for_sync()
    st.rerun()


def setup_sidebar(orchestrator: SyncOrchestrator) -> None:
    """Set up the sidebar with sync controls and settings.

    Args:
        orchestrator: Shared sync orchestrator
    """
    store = orchestrator.config_store

    with st.sidebar:
        st.header("CodeTrack")
        st.caption("Coding activity from your time-tracking logs")

        if st.button("🔄 Sync Now", use_container_width=True):
            orchestrator.request_sync()
            with st.spinner("Syncing..."):
                result = orchestrator.wait_for_sync()
            if result is not None:
                show_sync_result(result)

        st.write(f"- Auto-sync: Every {config.sync_interval // 60} minutes")
        st.write(f"- Update Count: {st.session_state[UPDATE_COUNT_KEY]}")

        st.divider()
        window = st.selectbox(
            "Window",
            WINDOW_LENGTHS,
            index=WINDOW_LENGTHS.index(store.window_length),
            format_func=lambda days: f"{days} Days",
        )
        if window != store.window_length:
            store.set_window_length(window)
            wait_and_rerun(orchestrator)

        st.divider()
        st.subheader("📁 Data Sources")
        for source in store.data_sources:
            col1, col2 = st.columns([4, 1])
            enabled = col1.checkbox(source.name, value=source.is_enabled, key=f"enabled-{source.id}")
            if enabled != source.is_enabled:
                store.set_source_enabled(source.id, enabled)
                wait_and_rerun(orchestrator)
            if col2.button("✕", key=f"remove-{source.id}"):
                store.remove_data_source(source.id)
                wait_and_rerun(orchestrator)
            col1.caption(source.locator)

        if len(store.data_sources) < store.max_data_sources:
            with st.expander("Add Source"):
                locator = st.text_input("Tracking file", value=str(config.default_source_path))
                name = st.text_input("Name", value=Path(locator).stem)
                if st.button("Add"):
                    store.add_data_source(name, locator)
                    wait_and_rerun(orchestrator)

        st.divider()
        st.subheader("🎨 Thresholds")
        for threshold in store.thresholds:
            st.markdown(
                f"<span style='color:{threshold.color.to_css()}'>■</span> {threshold.display_name}",
                unsafe_allow_html=True,
            )
        if st.button("Reset to Defaults"):
            store.reset_thresholds()
            wait_and_rerun(orchestrator)


def main():
    """Main application entry point."""
    st.title("CodeTrack")
    st.markdown("Daily coding time across your tracked editors")

    orchestrator = get_orchestrator()

    # Auto-refresh picks up the hourly background sync
    count = st_autorefresh(interval=config.sync_interval * 1000, limit=None, key=AUTOREFRESH_KEY)

    if UPDATE_COUNT_KEY not in st.session_state:
        st.session_state[UPDATE_COUNT_KEY] = 0

    if count > 0:
        st.session_state[UPDATE_COUNT_KEY] = count

    setup_sidebar(orchestrator)

    if orchestrator.config_store.is_first_launch:
        st.info("Add the JSON log of your time-tracking extension in the sidebar to get started.")

    published, last_updated = orchestrator.shared_store.load()
    if not published:
        st.warning(ERROR_NO_DATA)
        return

    days = select_display_days(published, orchestrator.config_store.window_length, date.today())
    show_usage_metrics(summarize_usage(usage_days_to_dataframe(days)))

    grid_tab, chart_tab = st.tabs(["Grid", "Chart"])
    with grid_tab:
        show_contribution_grid(days)
    with chart_tab:
        show_usage_chart(days)

    if last_updated is not None:
        st.caption(f"Last Update: {last_updated.strftime(DATETIME_FORMAT)}")


if __name__ == "__main__":
    main()
