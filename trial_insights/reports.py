"""
Read-only aggregate reports over the cleaned trial stages.

Each report takes a stage DataFrame (normally ``ClinicalTrials_ParsedDates``) and
returns a small result DataFrame. Rankings break ties on the grouping key so the
same input always produces the same top-N.
"""
from __future__ import annotations

import datetime
from functools import reduce
from typing import List, Optional

from pyspark.sql import Column, DataFrame, functions as F

from .cleaning import count_segments, explode_multi_valued
from .config import (
    COLLABORATOR_WINDOW_YEARS,
    COLLABORATORS_COL,
    COMPLETED_STATUS,
    COMPLETION_DATE_COL,
    COMPLETION_DATE_PARSED_COL,
    CONDITIONS_COL,
    DIABETES_KEYWORD,
    ENROLLMENT_COL,
    INTERVENTION_FALLBACK,
    INTERVENTION_RULES,
    INTERVENTIONS_COL,
    NON_DIABETIC_PATTERN,
    SENTINEL,
    SPONSOR_COL,
    START_DATE_COL,
    START_DATE_PARSED_COL,
    STATUS_COL,
    STUDY_TYPE_COL,
    TOP_COLLABORATORS_N,
    TOP_CONDITIONS_N,
    TOP_SPONSOR_TREND_N,
    TOP_SPONSORS_N,
)


def rank_by_count(df: DataFrame, key: str, count_col: str, n: Optional[int] = None) -> DataFrame:
    """Count rows per ``key``, most frequent first; optionally keep only the top ``n``."""
    ranked = df.groupBy(key).agg(F.count("*").alias(count_col)).orderBy(F.desc(count_col), F.asc(key))
    return ranked.limit(n) if n is not None else ranked


def total_trials(df: DataFrame) -> DataFrame:
    return df.agg(F.count("*").alias("Total_Trials"))


def null_profile(df: DataFrame, columns: Optional[List[str]] = None) -> DataFrame:
    """Number of null values per column, as a single row."""
    if columns is None:
        columns = df.columns
    return df.select(
        [F.sum(F.when(F.col(c).isNull(), 1).otherwise(0)).alias(c) for c in columns]
    )


def completion_split(df: DataFrame) -> DataFrame:
    """Completed trials have a parsable completion date; everything else counts as ongoing."""
    status = (
        F.when(F.col(COMPLETION_DATE_PARSED_COL).isNotNull(), F.lit("Completed"))
        .otherwise(F.lit("Ongoing"))
        .alias("Trial_Status")
    )
    return df.groupBy(status).agg(F.count("*").alias("Trial_Count")).orderBy("Trial_Status")


def study_type_frequency(df: DataFrame) -> DataFrame:
    return rank_by_count(df, STUDY_TYPE_COL, "Frequency")


def _months_between_parsed_dates() -> Column:
    return F.months_between(F.col(COMPLETION_DATE_PARSED_COL), F.col(START_DATE_PARSED_COL))


def duration_by_study_type(df: DataFrame) -> DataFrame:
    """
    Average and longest trial duration in months per study type.

    Rows qualify on their raw dates; a date that does not parse still counts
    towards ``study_count`` but not towards the duration figures.
    """
    months = _months_between_parsed_dates()
    return (
        df.where(F.col(START_DATE_COL).isNotNull() & F.col(COMPLETION_DATE_COL).isNotNull())
        .groupBy(STUDY_TYPE_COL)
        .agg(
            F.round(F.avg(months), 1).alias("avg_duration_months"),
            F.round(F.max(months), 1).alias("max_duration_months"),
            F.count("*").alias("study_count"),
        )
        .orderBy(F.desc_nulls_last("avg_duration_months"), F.asc(STUDY_TYPE_COL))
    )


def average_trial_length(df: DataFrame) -> DataFrame:
    return df.where(
        F.col(COMPLETION_DATE_PARSED_COL).isNotNull() & F.col(START_DATE_PARSED_COL).isNotNull()
    ).agg(F.round(F.avg(_months_between_parsed_dates()), 2).alias("Average_Trial_Length_Months"))


def top_sponsors(df: DataFrame, n: int = TOP_SPONSORS_N) -> DataFrame:
    return rank_by_count(df, SPONSOR_COL, "num_trials", n)


def start_year_trend(df: DataFrame) -> DataFrame:
    return (
        df.where(F.col(START_DATE_PARSED_COL).isNotNull())
        .groupBy(F.year(START_DATE_PARSED_COL).alias("Start_Year"))
        .agg(F.count("*").alias("Trial_Count"))
        .orderBy("Start_Year")
    )


def top_sponsor_yearly_trend(df: DataFrame, n: int = TOP_SPONSOR_TREND_N) -> DataFrame:
    """Trials started per year for the ``n`` sponsors with the most trials overall."""
    leaders = top_sponsors(df, n).select(SPONSOR_COL)
    return (
        df.where(F.col(START_DATE_PARSED_COL).isNotNull())
        .join(leaders, SPONSOR_COL, "inner")
        .groupBy(F.year(START_DATE_PARSED_COL).alias("Year"), F.col(SPONSOR_COL))
        .agg(F.count("*").alias("TrialCount"))
        .orderBy("Year", SPONSOR_COL)
    )


def top_conditions(df: DataFrame, n: int = TOP_CONDITIONS_N) -> DataFrame:
    conditions = explode_multi_valued(df.select(CONDITIONS_COL), CONDITIONS_COL, "Condition")
    return rank_by_count(conditions, "Condition", "Frequency", n)


def condition_complexity(df: DataFrame) -> DataFrame:
    label = (
        F.when(count_segments(F.col(CONDITIONS_COL)) > 1, F.lit("Multi-Condition"))
        .otherwise(F.lit("Single Condition"))
        .alias("ConditionComplexity")
    )
    return df.groupBy(label).agg(F.count("*").alias("Count")).orderBy("ConditionComplexity")


def intervention_type(column: Column) -> Column:
    """Label an intervention by the first matching keyword in ``INTERVENTION_RULES``."""
    text = F.lower(column)
    keyword, label = INTERVENTION_RULES[0]
    first = F.when(text.contains(keyword), F.lit(label))
    chained = reduce(
        lambda expr, rule: expr.when(text.contains(rule[0]), F.lit(rule[1])),
        INTERVENTION_RULES[1:],
        first,
    )
    return chained.otherwise(F.lit(INTERVENTION_FALLBACK))


def intervention_types(df: DataFrame) -> DataFrame:
    interventions = explode_multi_valued(df.select(INTERVENTIONS_COL), INTERVENTIONS_COL, "Intervention")
    return (
        interventions.groupBy(intervention_type(F.col("Intervention")).alias("Intervention_Type"))
        .agg(F.count("*").alias("Count"))
        .orderBy(F.desc("Count"), F.asc("Intervention_Type"))
    )


def collaborator_mentions(
    df: DataFrame, reference_year: int, window_years: int = COLLABORATOR_WINDOW_YEARS
) -> DataFrame:
    """One (Year, Collaborator) row per named collaborator on trials started inside the window."""
    dated = df.where(F.col(COLLABORATORS_COL).isNotNull() & F.col(START_DATE_PARSED_COL).isNotNull())
    mentions = explode_multi_valued(
        dated.select(F.year(START_DATE_PARSED_COL).alias("Year"), F.col(COLLABORATORS_COL)),
        COLLABORATORS_COL,
        "Collaborator",
    )
    return mentions.where(
        (F.col("Collaborator") != SENTINEL)
        & F.col("Year").between(reference_year - window_years, reference_year)
    ).select("Year", "Collaborator")


def top_collaborators_trend(
    df: DataFrame, n: int = TOP_COLLABORATORS_N, reference_year: Optional[int] = None
) -> DataFrame:
    """Yearly collaboration counts for the ``n`` busiest collaborators of recent years."""
    if reference_year is None:
        reference_year = datetime.date.today().year
    mentions = collaborator_mentions(df, reference_year)
    leaders = rank_by_count(mentions, "Collaborator", "Total", n).select("Collaborator")
    return (
        mentions.join(leaders, "Collaborator", "inner")
        .groupBy("Year", "Collaborator")
        .agg(F.count("*").alias("Count"))
        .select("Year", "Collaborator", "Count")
        .orderBy("Collaborator", "Year")
    )


def enrollment_statistics(df: DataFrame) -> DataFrame:
    """
    Descriptive statistics of enrollment size.

    Only strictly positive enrollments are used; zero is treated as unreported.
    Non-numeric values (including the ``N/A`` placeholder) are ignored.
    """
    enrollment = df.select(F.expr(f"try_cast(`{ENROLLMENT_COL}` AS DOUBLE)").alias("enrollment"))
    valid = enrollment.where(F.col("enrollment").isNotNull() & (F.col("enrollment") > 0))
    return valid.agg(
        F.count("*").alias("total_trials"),
        F.min("enrollment").cast("long").alias("min_enrollment"),
        F.max("enrollment").cast("long").alias("max_enrollment"),
        F.round(F.avg("enrollment"), 2).alias("avg_enrollment"),
        F.expr("percentile(enrollment, 0.5)").alias("median_enrollment"),
        F.expr("percentile(enrollment, 0.25)").alias("q1"),
        F.expr("percentile(enrollment, 0.75)").alias("q3"),
        F.stddev("enrollment").alias("std_dev"),
    )


def diabetes_yearly_trend(df: DataFrame) -> DataFrame:
    """Completed diabetes studies per completion year, excluding "non-diabetic" mentions."""
    conditions = F.lower(F.col(CONDITIONS_COL))
    return (
        df.where(
            F.col(COMPLETION_DATE_PARSED_COL).isNotNull()
            & (F.upper(F.col(STATUS_COL)) == COMPLETED_STATUS)
            & conditions.like(DIABETES_KEYWORD)
            & ~conditions.rlike(NON_DIABETIC_PATTERN)
        )
        .groupBy(F.year(COMPLETION_DATE_PARSED_COL).alias("year"))
        .agg(F.count("*").alias("diabetes_studies_count"))
        .orderBy("year")
    )


# Reports run by the pipeline, in output order.
REPORTS = {
    "total_trials": total_trials,
    "completion_split": completion_split,
    "study_type_frequency": study_type_frequency,
    "duration_by_study_type": duration_by_study_type,
    "average_trial_length": average_trial_length,
    "top_sponsors": top_sponsors,
    "start_year_trend": start_year_trend,
    "top_sponsor_yearly_trend": top_sponsor_yearly_trend,
    "top_conditions": top_conditions,
    "condition_complexity": condition_complexity,
    "intervention_types": intervention_types,
    "top_collaborators_trend": top_collaborators_trend,
    "enrollment_statistics": enrollment_statistics,
    "diabetes_yearly_trend": diabetes_yearly_trend,
}
