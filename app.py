from datetime import date
from pathlib import Path

import pandas as pd
import plotly.express as px
import streamlit as st

from bizdays.calendar_utils import business_day_frame, compute
from bizdays.errors import BizdaysError
from bizdays.fetch import load_holidays
from bizdays.holidays import JURISDICTIONS
from bizdays.router import today_in_timezone
from bizdays.runtime_logging import (
    append_runtime_event,
    install_global_exception_logging,
    read_runtime_events,
    runtime_log_path,
)
from bizdays.settings import load_settings


install_global_exception_logging()


SETTINGS = load_settings()
NO_HOLIDAYS = "None"
HOLIDAY_SOURCE_OPTIONS = [NO_HOLIDAYS] + [j.name for j in JURISDICTIONS.values()]
SLUG_BY_NAME = {j.name: j.slug for j in JURISDICTIONS.values()}

UI_DEFAULTS = {
    "holiday_source": NO_HOLIDAYS,
    "runtime_log_limit": 100,
}


def _init_state() -> None:
    for key, value in UI_DEFAULTS.items():
        st.session_state.setdefault(key, value)
    if "reference_date" not in st.session_state:
        st.session_state["reference_date"] = date.fromisoformat(today_in_timezone(SETTINGS.timezone))


def _holidays_for(source_name: str, year: int) -> tuple[dict | None, str | None]:
    slug = SLUG_BY_NAME.get(source_name)
    if slug is None:
        return None, None
    jurisdiction = JURISDICTIONS[slug]
    try:
        return load_holidays(jurisdiction, year), None
    except BizdaysError as exc:
        msg = f"Holidays unavailable for {jurisdiction.name}: {exc}"
        append_runtime_event(
            level="WARNING",
            event="holiday_source_failed",
            message=msg,
            context={"jurisdiction": slug, "year": year},
            exc=exc,
        )
        return None, msg


st.set_page_config(page_title="Business Days", layout="wide")
_init_state()

st.title("Business Days This Month")

with st.sidebar:
    st.subheader("Inputs")
    st.date_input("Reference Date", key="reference_date", format="YYYY-MM-DD")
    st.selectbox(
        "Holiday Source",
        HOLIDAY_SOURCE_OPTIONS,
        key="holiday_source",
        help="Public holidays are fetched from the state government listing for the reference year.",
    )
    st.caption(f"Today in {SETTINGS.timezone}: {today_in_timezone(SETTINGS.timezone)}")

reference_date: date = st.session_state["reference_date"]
holidays, holiday_warning = _holidays_for(st.session_state["holiday_source"], reference_date.year)
if holiday_warning:
    st.warning(holiday_warning)

report = compute(reference_date.isoformat(), holidays)

c1, c2, c3 = st.columns(3)
c1.metric("Business Days to Date", report.business_days_to_today)
c2.metric("Business Days in Month", report.business_days_total)
c3.metric("Remaining", report.business_days_total - report.business_days_to_today)
st.caption(f"{report.start_of_month.isoformat()} to {report.end_of_month.isoformat()}")

month_df = business_day_frame(report.start_of_month, report.end_of_month, holidays)
month_df["Through Reference Date"] = month_df["Date"] <= report.today.isoformat()

st.plotly_chart(
    px.line(
        month_df,
        x="Date",
        y="Running Business Days",
        markers=True,
        title="Running Business Days",
    ),
    width="stretch",
)
st.dataframe(month_df, hide_index=True, width="stretch")

st.subheader("Holidays")
if holidays:
    st.dataframe(
        pd.DataFrame(sorted(holidays.items()), columns=["Date", "Holiday"]),
        hide_index=True,
        width="stretch",
    )
else:
    st.info("No holidays applied.")

with st.expander("Runtime Diagnostics"):
    st.caption(f"Runtime log file: `{Path(runtime_log_path())}`")
    st.number_input("Recent runtime log rows", min_value=20, max_value=2000, step=20, key="runtime_log_limit")
    runtime_events = read_runtime_events(limit=int(st.session_state["runtime_log_limit"]))
    if runtime_events:
        runtime_df = pd.DataFrame(runtime_events)
        preferred_cols = ["timestamp_utc", "level", "event", "message", "exception_type", "exception_message", "context"]
        runtime_cols = [c for c in preferred_cols if c in runtime_df.columns]
        st.dataframe(runtime_df[runtime_cols].astype(str), hide_index=True, width="stretch")
    else:
        st.caption("No runtime events recorded.")
