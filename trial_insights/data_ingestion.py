"""
Data ingestion helpers: start Spark, load the trials CSV and register stage views.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Union

from py4j.protocol import Py4JJavaError
from pyspark.errors import AnalysisException
from pyspark.sql import DataFrame, SparkSession

from .config import CSV_READ_OPTIONS, SPARK_APP_NAME, SPARK_MASTER

logger = logging.getLogger(__name__)


class LoadError(RuntimeError):
    """Raised when the source file cannot be turned into a table."""


def create_spark_session(
    app_name: str = SPARK_APP_NAME, master: str = SPARK_MASTER
) -> SparkSession:
    """Create a local Spark session with Arrow enabled for faster conversions."""
    return (
        SparkSession.builder.appName(app_name)
        .master(master)
        .config("spark.sql.execution.arrow.pyspark.enabled", "true")
        .getOrCreate()
    )


def load_trials(spark: SparkSession, csv_path: Union[str, Path]) -> DataFrame:
    """
    Read the trials CSV into a DataFrame.

    Column names come from the header line and types are inferred from the data.
    Malformed rows are kept (Spark's permissive mode leaves their fields null) so a
    bad record never aborts the load; a missing file or a file without a header does.
    """
    path = Path(csv_path)
    if not path.is_file():
        raise LoadError(f"Trials file not found: {path}")

    try:
        df = spark.read.options(**CSV_READ_OPTIONS).csv(str(path.resolve()))
    except (AnalysisException, Py4JJavaError) as exc:
        raise LoadError(f"Could not read {path}: {exc}") from exc

    if not df.columns:
        raise LoadError(f"No header row found in {path}")

    logger.info("Loaded %s with %d columns", path, len(df.columns))
    return df


def register_stage_views(stages: Dict[str, DataFrame]) -> None:
    """Expose each stage as a temp view so it can be queried with Spark SQL."""
    for view_name, df in stages.items():
        df.createOrReplaceTempView(view_name)
        logger.debug("Registered temp view %s", view_name)
