from pathlib import Path

import pandas as pd
import streamlit as st

from trial_insights import config
from trial_insights.pipeline import run_pipeline


st.set_page_config(page_title="Clinical Trial Analytics", layout="wide")
st.title("Clinical Trial Analytics")

st.sidebar.header("Run Settings")
csv_path = st.sidebar.text_input("Trials CSV", value=str(config.RAW_CSV_PATH))
output_dir = Path(st.sidebar.text_input("Output folder", value=str(config.OUTPUT_DIR)))

# (report, x column, y column, chart kind)
CHARTS = [
    ("completion_split", "Trial_Status", "Trial_Count", "bar"),
    ("study_type_frequency", "Study Type", "Frequency", "bar"),
    ("duration_by_study_type", "Study Type", "avg_duration_months", "bar"),
    ("top_sponsors", "Sponsor", "num_trials", "bar"),
    ("start_year_trend", "Start_Year", "Trial_Count", "line"),
    ("top_conditions", "Condition", "Frequency", "bar"),
    ("condition_complexity", "ConditionComplexity", "Count", "bar"),
    ("intervention_types", "Intervention_Type", "Count", "bar"),
    ("diabetes_yearly_trend", "year", "diabetes_studies_count", "line"),
]


def load_report(name: str) -> pd.DataFrame:
    path = output_dir / f"{name}.csv"
    if path.exists():
        return pd.read_csv(path)
    return pd.DataFrame()


if st.sidebar.button("Run Pipeline"):
    with st.spinner("Running Spark pipeline..."):
        run_pipeline(Path(csv_path), output_dir)
    st.success("Pipeline completed")

if not (output_dir / config.RUN_SUMMARY_JSON).exists():
    st.info("Configure inputs in the sidebar and click 'Run Pipeline'.")
    st.stop()

for name, x, y, kind in CHARTS:
    df = load_report(name)
    if df.empty:
        continue
    st.subheader(name.replace("_", " ").title())
    series = df.set_index(x)[y]
    if kind == "line":
        st.line_chart(series)
    else:
        st.bar_chart(series)

st.subheader("Top Sponsors By Year")
sponsor_trend = load_report("top_sponsor_yearly_trend")
if not sponsor_trend.empty:
    st.line_chart(sponsor_trend.pivot(index="Year", columns="Sponsor", values="TrialCount"))

st.subheader("Top Collaborators By Year")
collab_trend = load_report("top_collaborators_trend")
if not collab_trend.empty:
    st.bar_chart(collab_trend.pivot(index="Year", columns="Collaborator", values="Count"))

st.subheader("Enrollment Statistics")
st.dataframe(load_report("enrollment_statistics"))

st.subheader("Average Trial Length")
st.dataframe(load_report("average_trial_length"))
