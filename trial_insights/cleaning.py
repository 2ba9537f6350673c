"""
Cleaning stages: null filling, whitespace trimming, date parsing and multi-value expansion.

Every function takes a DataFrame and returns a new one; inputs are never modified.
"""
from __future__ import annotations

from typing import Iterable, Optional

from pyspark.sql import Column, DataFrame, functions as F

from .config import (
    COMPLETION_DATE_COL,
    COMPLETION_DATE_PARSED_COL,
    MISSING_TOKENS,
    MULTI_VALUE_PATTERN,
    NULL_FILL_COLUMNS,
    SENTINEL,
    START_DATE_COL,
    START_DATE_PARSED_COL,
    TRIM_COLUMNS,
    VALID_COMPLETION_FLAG_COL,
)


def normalize_nulls(
    df: DataFrame, columns: Iterable[str] = NULL_FILL_COLUMNS, sentinel: str = SENTINEL
) -> DataFrame:
    """
    Replace nulls in ``columns`` with ``sentinel`` so no row has to be dropped.

    Filled columns become strings, matching SQL ``COALESCE(col, 'N/A')``. Empty
    strings are not nulls and are left as they are.
    """
    targets = set(columns)
    return df.select(
        [
            F.coalesce(F.col(c).cast("string"), F.lit(sentinel)).alias(c) if c in targets else F.col(c)
            for c in df.columns
        ]
    )


def trim_text_columns(df: DataFrame, columns: Iterable[str] = TRIM_COLUMNS) -> DataFrame:
    """Strip leading/trailing whitespace from categorical columns used as grouping keys."""
    targets = set(columns)
    return df.select([F.trim(F.col(c)).alias(c) if c in targets else F.col(c) for c in df.columns])


def is_effectively_missing(column: Column) -> Column:
    """True when a value is null, blank, or one of the placeholder tokens (never null itself)."""
    text = column.cast("string")
    missing = text.isNull() | (F.trim(text) == "") | F.lower(text).isin(*MISSING_TOKENS)
    return F.when(missing, F.lit(True)).otherwise(F.lit(False))


def try_parse_date(column_name: str) -> Column:
    """Parse an ISO date string; anything unparsable becomes null instead of failing."""
    return F.expr(f"try_cast(`{column_name}` AS DATE)")


def parse_dates(df: DataFrame) -> DataFrame:
    """
    Add parsed start/completion dates and the completion-date validity flag.

    The flag is derived from the raw completion text, not from the parse: a value
    such as ``2021-05-03garbage`` is flagged valid while its parsed date is null.
    """
    return (
        df.withColumn(START_DATE_PARSED_COL, try_parse_date(START_DATE_COL))
        .withColumn(COMPLETION_DATE_PARSED_COL, try_parse_date(COMPLETION_DATE_COL))
        .withColumn(VALID_COMPLETION_FLAG_COL, ~is_effectively_missing(F.col(COMPLETION_DATE_COL)))
    )


def split_segments(column: Column) -> Column:
    """Split a pipe-delimited field into trimmed, non-empty values."""
    parts = F.transform(F.split(column, MULTI_VALUE_PATTERN), lambda part: F.trim(part))
    return F.filter(parts, lambda part: part != "")


def count_segments(column: Column) -> Column:
    return F.size(split_segments(column))


def explode_multi_valued(df: DataFrame, column: str, output_col: Optional[str] = None) -> DataFrame:
    """
    Emit one row per value of a pipe-delimited field, copying the other columns.

    Repeated values are kept, so ``Diabetes|Obesity|Diabetes`` yields two
    ``Diabetes`` rows. Rows whose field is null produce nothing.
    """
    output_col = output_col or column
    return df.withColumn(output_col, F.explode(split_segments(F.col(column))))
