"""Shared protocol components used by every service."""
