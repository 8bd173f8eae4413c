"""Clinic service: departments and medical facilities."""
