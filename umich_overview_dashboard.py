"""
umich_overview_dashboard.py

Streamlit dashboard over the course tracker's published overview.csv.

Key features:
- Reads the overview from the stash URL (or COURSE_TRACKER_OUTPUT_DIR for
  local runs)
- Filters by department, undergrad vs graduate, and study abroad
- Bar chart of the courses with the least room left
- Full overview table

Run with:
    streamlit run umich_overview_dashboard.py
"""

from typing import List, Optional

import altair as alt
import pandas as pd
import streamlit as st

from umich_tracker_config import CACHE_BASE_URL, OUTPUT_DIR, OVERVIEW_FILE, PREFIX

LEVEL_OPTIONS = ["All", "Undergraduate", "Graduate"]


def overview_source() -> str:
    if OUTPUT_DIR is not None:
        return str(OUTPUT_DIR / PREFIX / OVERVIEW_FILE)
    return f"{CACHE_BASE_URL}/{OVERVIEW_FILE}"


def load_overview(source: str) -> pd.DataFrame:
    df = pd.read_csv(source, dtype={"department": str, "title": str}, keep_default_na=False)
    if df.empty:
        return df

    for col in ("number", "capacity", "available", "waitlist"):
        df[col] = pd.to_numeric(df[col], errors="coerce").astype("Int64")
    df["percent_available"] = pd.to_numeric(df["percent_available"], errors="coerce")

    # overview.csv spells booleans the JavaScript way
    for col in ("undergrad", "studyAbroad"):
        df[col] = df[col].astype(str).str.strip().str.lower() == "true"

    df["course_code"] = df["department"].str.cat(
        df["number"].astype(str).str.zfill(3), sep=" "
    )
    return df


def filter_overview(
    df: pd.DataFrame,
    departments: Optional[List[str]] = None,
    level: str = "All",
    include_study_abroad: bool = True,
) -> pd.DataFrame:
    if departments:
        df = df[df["department"].isin(departments)]

    if level == "Undergraduate":
        df = df[df["undergrad"]]
    elif level == "Graduate":
        df = df[~df["undergrad"]]

    if not include_study_abroad:
        df = df[~df["studyAbroad"]]

    return df


def main():
    st.set_page_config(page_title="LSA Course Tracker", layout="wide")
    st.title("LSA Course Tracker")

    source = overview_source()
    try:
        df_raw = load_overview(source)
    except (OSError, pd.errors.ParserError) as e:
        st.error(f"Could not read overview from {source}: {e}")
        return

    if df_raw.empty:
        st.warning("No data available.")
        return

    st.sidebar.header("Filters")

    department_values = sorted(df_raw["department"].dropna().unique().tolist())
    departments = st.sidebar.multiselect("Departments", options=department_values, default=[])
    level = st.sidebar.selectbox("Level", LEVEL_OPTIONS, index=0)
    include_study_abroad = st.sidebar.checkbox("Include study abroad", value=False)
    top_n = st.sidebar.slider("Courses in chart", min_value=10, max_value=100, value=25, step=5)

    df = filter_overview(df_raw, departments, level, include_study_abroad)
    if df.empty:
        st.warning("No courses after applying filters.")
        return

    c1, c2, c3 = st.columns(3)
    c1.metric("Courses", f"{len(df):,}")
    c2.metric("Open seats", f"{int(df['available'].sum()):,}")
    c3.metric("On wait lists", f"{int(df['waitlist'].sum()):,}")

    df_plot = df.sort_values(["percent_available", "waitlist"], ascending=[True, False]).head(top_n)

    chart = (
        alt.Chart(df_plot)
        .mark_bar()
        .encode(
            x=alt.X("percent_available:Q", title="Share of seats open", axis=alt.Axis(format="%")),
            y=alt.Y("course_code:N", sort="x", title="Course"),
            color=alt.Color("undergrad:N", title="Undergrad"),
            tooltip=["course_code", "title", "available", "capacity", "waitlist"],
        )
        .properties(height=max(300, 18 * len(df_plot)), title="Fullest courses")
    )
    st.altair_chart(chart, use_container_width=True)

    st.subheader("Overview")
    st.dataframe(
        df[["course_code", "title", "available", "capacity", "percent_available", "waitlist"]]
        .sort_values("course_code")
        .rename(
            columns={
                "course_code": "Course",
                "title": "Title",
                "available": "Open",
                "capacity": "Capacity",
                "percent_available": "% open",
                "waitlist": "Wait list",
            }
        ),
        use_container_width=True,
    )


if __name__ == "__main__":
    main()
