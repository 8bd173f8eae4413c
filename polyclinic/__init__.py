"""Polyclinic services: clients, clinic, employees, registrations and results."""

__version__ = "0.1.0"
