"""
Merge Updater

Partial updates ("patches") applied field by field onto a stored entity.

Rules:
- a field absent or None in the patch keeps its stored value
- nested value objects are merged with the same rules, never replaced wholesale
- a non-empty collection replaces the stored collection, an empty one is
  "no change"
- clearing is explicit: field names passed in `clear` are reset to None
  (scalars, nested objects) or to an empty collection before the patch applies
- `id` is never touched
"""

import dataclasses
import types
import typing
from collections.abc import Iterable, Mapping
from typing import Any, Generic, TypeVar

from polyclinic.core.validation import ConstraintValidator

T = TypeVar("T")

COLLECTION_TYPES = (list, tuple, set, frozenset)
IMMUTABLE_FIELDS = frozenset({"id"})


def _is_dataclass_instance(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _nested_type(owner: type, name: str) -> type | None:
    """Dataclass type declared for a field, unwrapping Optional."""
    hint = typing.get_type_hints(owner).get(name)
    if hint is None:
        return None
    if isinstance(hint, types.UnionType) or typing.get_origin(hint) is typing.Union:
        candidates = typing.get_args(hint)
    else:
        candidates = (hint,)
    for candidate in candidates:
        if isinstance(candidate, type) and dataclasses.is_dataclass(candidate):
            return candidate
    return None


def _as_patch(value: Any) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}


def _cleared(current: Any) -> Any:
    if isinstance(current, COLLECTION_TYPES):
        return type(current)()
    return None


def merge(stored: T, patch: Mapping[str, Any] | Any | None, *, clear: Iterable[str] = ()) -> T:
    """
    Return a copy of `stored` with the patch applied; `stored` is not modified.

    Args:
        stored: Dataclass entity or value object
        patch: Mapping (or dataclass) of new values
        clear: Field names explicitly reset before the patch applies

    Raises:
        ValueError: If the patch or `clear` names a field `stored` does not have
    """
    if not _is_dataclass_instance(stored):
        raise TypeError(f"Cannot merge into {type(stored).__name__}")

    owner = type(stored)
    known = {f.name for f in dataclasses.fields(stored)}
    changes: dict[str, Any] = {}

    for name in clear:
        if name not in known:
            raise ValueError(f"{owner.__name__} has no field '{name}'")
        if name in IMMUTABLE_FIELDS:
            continue
        changes[name] = _cleared(getattr(stored, name))

    for name, value in _as_patch(patch or {}).items():
        if name not in known:
            raise ValueError(f"{owner.__name__} has no field '{name}'")
        if name in IMMUTABLE_FIELDS or value is None:
            continue

        current = changes.get(name, getattr(stored, name))

        if isinstance(value, COLLECTION_TYPES):
            if not value:
                continue
            changes[name] = type(current)(value) if isinstance(current, COLLECTION_TYPES) else value
            continue

        nested_type = _nested_type(owner, name)
        if nested_type is not None and (isinstance(value, Mapping) or _is_dataclass_instance(value)):
            base = current if current is not None else nested_type()
            changes[name] = merge(base, _as_patch(value))
            continue

        changes[name] = value

    if not changes:
        return stored
    return dataclasses.replace(stored, **changes)


class MergeUpdater(Generic[T]):
    """
    Merge followed by re-validation: a patched entity never reaches the store
    without passing its constraints.
    """

    def __init__(self, validator: ConstraintValidator[T]):
        self._validator = validator

    def apply(self, stored: T, patch: Mapping[str, Any] | None, *, clear: Iterable[str] = ()) -> T:
        """
        Raises:
            ValidationException: If the merged entity violates its constraints
        """
        merged = merge(stored, patch, clear=clear)
        self._validator.check(merged)
        return merged
