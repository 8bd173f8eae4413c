"""Caller identity, capability checks and redaction."""
