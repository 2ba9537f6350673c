"""Spark analytics over a ClinicalTrials.gov CSV extract."""
