"""Maintenance scripts for EDF corpora."""
