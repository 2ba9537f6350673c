"""
Project configuration for the clinical trial analytics pipeline.
"""
from pathlib import Path

# Source extract of ClinicalTrials.gov records (one row per study).
RAW_CSV_PATH = Path("data") / "Clinicaltrial_16012025.csv"

# Where report tables and the run summary are written for the web UI and dashboard.
OUTPUT_DIR = Path("outputs")
RUN_SUMMARY_JSON = "run_summary.json"

# Spark defaults.
SPARK_APP_NAME = "ClinicalTrialAnalytics"
SPARK_MASTER = "local[*]"

# Reader options for the source CSV: quoted fields may contain commas and line breaks.
CSV_READ_OPTIONS = {
    "header": "true",
    "inferSchema": "true",
    "quote": '"',
    "escape": '"',
    "multiLine": "true",
}

# Stage view names, in pipeline order.
RAW_VIEW = "clinical_trials"
NO_NULLS_VIEW = "clinical_trials_no_nulls"
TRIMMED_VIEW = "clinical_trials_trimmed"
PARSED_DATES_VIEW = "ClinicalTrials_ParsedDates"

# Source columns.
ID_COL = "NCT Number"
TITLE_COL = "Study Title"
ACRONYM_COL = "Acronym"
STATUS_COL = "Study Status"
CONDITIONS_COL = "Conditions"
INTERVENTIONS_COL = "Interventions"
SPONSOR_COL = "Sponsor"
COLLABORATORS_COL = "Collaborators"
ENROLLMENT_COL = "Enrollment"
FUNDER_TYPE_COL = "Funder Type"
STUDY_TYPE_COL = "Study Type"
STUDY_DESIGN_COL = "Study Design"
START_DATE_COL = "Start Date"
COMPLETION_DATE_COL = "Completion Date"

TRIAL_COLUMNS = [
    ID_COL,
    TITLE_COL,
    ACRONYM_COL,
    STATUS_COL,
    CONDITIONS_COL,
    INTERVENTIONS_COL,
    SPONSOR_COL,
    COLLABORATORS_COL,
    ENROLLMENT_COL,
    FUNDER_TYPE_COL,
    STUDY_TYPE_COL,
    STUDY_DESIGN_COL,
    START_DATE_COL,
    COMPLETION_DATE_COL,
]

# Derived columns.
START_DATE_PARSED_COL = "StartDateFormatted"
COMPLETION_DATE_PARSED_COL = "CompletionDateFormatted"
VALID_COMPLETION_FLAG_COL = "HasValidCompletionDate"

# Missing-data handling.
SENTINEL = "N/A"
MISSING_TOKENS = ("n/a", "na", "unknown", "null")
NULL_FILL_COLUMNS = list(TRIAL_COLUMNS)
TRIM_COLUMNS = [STATUS_COL, FUNDER_TYPE_COL, STUDY_TYPE_COL]

# Multi-valued fields are separated by a literal pipe (Java regex for split()).
MULTI_VALUE_PATTERN = r"\|"

# Checked in order; the first keyword found in the lower-cased intervention wins.
INTERVENTION_RULES = (
    ("drug", "Drug"),
    ("device", "Device"),
    ("surgery", "Procedure"),
    ("behaviour", "Behavioral"),
    ("biological", "Biological"),
)
INTERVENTION_FALLBACK = "Other"

COMPLETED_STATUS = "COMPLETED"
DIABETES_KEYWORD = "%diab%"
NON_DIABETIC_PATTERN = r"\bnon[\s-]*diab[a-z]*\b"

# Report sizes.
TOP_SPONSORS_N = 10
TOP_SPONSOR_TREND_N = 5
TOP_CONDITIONS_N = 10
TOP_COLLABORATORS_N = 5
COLLABORATOR_WINDOW_YEARS = 5
