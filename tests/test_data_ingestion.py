import pytest

from trial_insights import config
from trial_insights.data_ingestion import LoadError, load_trials, register_stage_views


def test_load_trials_reads_header_and_rows(spark, sample_csv):
    df = load_trials(spark, sample_csv)

    assert df.columns == config.TRIAL_COLUMNS
    assert df.count() == 3


def test_load_trials_handles_quotes_and_multiline_fields(spark, sample_csv):
    rows = {r["NCT Number"]: r for r in load_trials(spark, sample_csv).collect()}

    assert rows["NCT001"]["Study Title"] == "Metformin, diet and exercise"
    assert rows["NCT002"]["Study Title"] == 'A study with a "quoted" title'
    assert rows["NCT002"]["Study Design"] == (
        "Observational Model: Cohort\nTime Perspective: Prospective"
    )


def test_load_trials_infers_numeric_enrollment(spark, sample_csv):
    df = load_trials(spark, sample_csv)

    assert dict(df.dtypes)["Enrollment"] == "int"


def test_load_trials_missing_file_raises(spark, tmp_path):
    with pytest.raises(LoadError, match="not found"):
        load_trials(spark, tmp_path / "missing.csv")


def test_load_trials_empty_file_raises(spark, tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")

    with pytest.raises(LoadError):
        load_trials(spark, path)


def test_load_trials_keeps_short_rows(spark, tmp_path):
    path = tmp_path / "short.csv"
    path.write_text("NCT Number,Sponsor,Enrollment\nNCT9\nNCT10,Acme,12\n", encoding="utf-8")

    rows = load_trials(spark, path).orderBy("NCT Number").collect()

    assert len(rows) == 2
    assert rows[1]["NCT Number"] == "NCT9"
    assert rows[1]["Sponsor"] is None


def test_register_stage_views(spark, make_trials):
    df = make_trials({"NCT Number": "NCT1"}, {"NCT Number": "NCT2"})

    register_stage_views({config.RAW_VIEW: df})

    assert spark.sql(f"SELECT COUNT(*) AS n FROM {config.RAW_VIEW}").first()["n"] == 2


def test_load_trials_unreadable_file_raises(spark, tmp_path):
    path = tmp_path / "trials.csv.gz"
    path.write_bytes(b"this is not gzip data\x00\x01\x02")

    with pytest.raises(LoadError, match="Could not read"):
        load_trials(spark, path)
