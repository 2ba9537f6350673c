import pytest
from pyspark.sql import types as T

from trial_insights.config import TRIAL_COLUMNS
from trial_insights.data_ingestion import create_spark_session

TRIAL_SCHEMA = T.StructType([T.StructField(c, T.StringType(), True) for c in TRIAL_COLUMNS])


@pytest.fixture(scope="session")
def spark():
    session = create_spark_session(app_name="trial-insights-tests", master="local[1]")
    session.conf.set("spark.sql.shuffle.partitions", "1")
    yield session
    session.stop()


@pytest.fixture
def make_trials(spark):
    """Build a raw trials frame from partial rows; unspecified columns are null."""

    def _make(*rows):
        data = [tuple(row.get(c) for c in TRIAL_COLUMNS) for row in rows]
        return spark.createDataFrame(data, TRIAL_SCHEMA)

    return _make


SAMPLE_CSV = '''NCT Number,Study Title,Acronym,Study Status,Conditions,Interventions,Sponsor,Collaborators,Enrollment,Funder Type,Study Type,Study Design,Start Date,Completion Date
NCT001,"Metformin, diet and exercise",MDE,COMPLETED,Type 2 Diabetes|Obesity,Drug: Metformin|Behavioral: Diet,Acme Pharma,City Hospital|State University,120,INDUSTRY,INTERVENTIONAL ,Allocation: RANDOMIZED,2018-01-01,2020-01-01
NCT002,"A study with a ""quoted"" title",,RECRUITING,Breast Cancer,Device: Pump,Acme Pharma,,0,OTHER, OBSERVATIONAL,"Observational Model: Cohort
Time Perspective: Prospective",2021-06-15,
NCT003,Retinopathy follow-up,,COMPLETED,non-diabetic retinopathy,Procedure: Laser surgery,Eye Institute,City Hospital,45,NIH,INTERVENTIONAL,Allocation: NA,2019-03-01,2021-03-01
'''


@pytest.fixture
def sample_csv(tmp_path):
    path = tmp_path / "trials.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path
