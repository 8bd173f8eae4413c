"""
Redaction of composed views.

A pure function applied after composition: person snapshots keep their
private fields only for top managers and for the person themselves.
"""

from typing import TypeVar

from pydantic import BaseModel

from polyclinic.core.composition.snapshots import PersonSnapshot
from polyclinic.core.domain import Authority
from polyclinic.core.security.context import AuthContext

V = TypeVar("V", bound=BaseModel)


def _redact_person(person: PersonSnapshot, ctx: AuthContext) -> PersonSnapshot:
    return person if ctx.is_owner(person.email) else person.redacted()


def redact_view(view: V, ctx: AuthContext) -> V:
    """Return `view` with person snapshots redacted for this viewer."""
    if ctx.has_authority(Authority.TOP_MANAGER):
        return view

    updates = {}
    for name in type(view).model_fields:
        value = getattr(view, name)
        if isinstance(value, PersonSnapshot):
            updates[name] = _redact_person(value, ctx)
        elif isinstance(value, list) and any(isinstance(item, PersonSnapshot) for item in value):
            updates[name] = [_redact_person(item, ctx) if isinstance(item, PersonSnapshot) else item for item in value]
    return view.model_copy(update=updates) if updates else view
