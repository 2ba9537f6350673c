"""
End-to-end orchestration: load, clean, run every report and export the results.
"""
from __future__ import annotations

import argparse
import json
import logging
import time
from pathlib import Path
from typing import Dict, Optional

from pyspark.sql import DataFrame, SparkSession

from . import config
from .cleaning import normalize_nulls, parse_dates, trim_text_columns
from .data_ingestion import create_spark_session, load_trials, register_stage_views
from .reports import REPORTS

logger = logging.getLogger(__name__)


def build_stages(raw: DataFrame) -> Dict[str, DataFrame]:
    """Derive every cleaning stage from the raw table, keyed by view name."""
    no_nulls = normalize_nulls(raw)
    trimmed = trim_text_columns(no_nulls)
    parsed = parse_dates(trimmed)
    return {
        config.RAW_VIEW: raw,
        config.NO_NULLS_VIEW: no_nulls,
        config.TRIMMED_VIEW: trimmed,
        config.PARSED_DATES_VIEW: parsed,
    }


def run_reports(parsed: DataFrame) -> Dict[str, DataFrame]:
    results = {}
    for name, report in REPORTS.items():
        logger.info("Running report %s", name)
        results[name] = report(parsed)
    return results


def export_reports(reports: Dict[str, DataFrame], output_dir: Path) -> Dict[str, Path]:
    """Write each report to ``<output_dir>/<name>.csv`` and return the paths."""
    output_dir.mkdir(exist_ok=True, parents=True)
    paths = {}
    for name, df in reports.items():
        path = output_dir / f"{name}.csv"
        df.toPandas().to_csv(path, index=False)
        paths[name] = path
    return paths


def run_pipeline(
    csv_path: Path = config.RAW_CSV_PATH,
    output_dir: Path = config.OUTPUT_DIR,
    spark: Optional[SparkSession] = None,
) -> Dict[str, object]:
    started = time.perf_counter()
    spark = spark or create_spark_session()
    output_dir = Path(output_dir)

    try:
        raw = load_trials(spark, csv_path)
    except Exception as e:
        logger.error("Pipeline failed: %s", e)
        raise

    stages = build_stages(raw)
    register_stage_views(stages)
    row_counts = {name: df.count() for name, df in stages.items()}
    logger.info("Built %d stages from %d rows", len(stages), row_counts[config.RAW_VIEW])

    reports = run_reports(stages[config.PARSED_DATES_VIEW])
    report_paths = export_reports(reports, output_dir)

    summary = {
        "source": str(csv_path),
        "row_counts": row_counts,
        "reports": {name: path.name for name, path in report_paths.items()},
        "elapsed_seconds": round(time.perf_counter() - started, 2),
    }
    summary_path = output_dir / config.RUN_SUMMARY_JSON
    with open(summary_path, "w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2)
    logger.info("Wrote %d reports to %s", len(report_paths), output_dir)

    return {
        "stages": stages,
        "reports": reports,
        "report_paths": report_paths,
        "summary_path": summary_path,
        "summary": summary,
    }


def main() -> None:
    ap = argparse.ArgumentParser(description="Clinical trial analytics pipeline")
    ap.add_argument("--csv", dest="csv_path", type=Path, default=config.RAW_CSV_PATH)
    ap.add_argument("--output-dir", dest="output_dir", type=Path, default=config.OUTPUT_DIR)
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    results = run_pipeline(args.csv_path, args.output_dir)
    print("Pipeline complete. Outputs:")
    for name, path in results["report_paths"].items():
        print(f"- {name}: {path}")
    print(f"- summary: {results['summary_path']}")


if __name__ == "__main__":
    main()
