"""Partial updates for job postings.

Every field named in an update request is classified before anything is sent
to the store:

- ``SetTo(value)``: overwrite the stored value.
- ``UNSET``: remove the field (the request carried ``""`` or ``null``).
- ``KEEP``: leave the stored value alone.

``skills`` is special: it is replaced wholesale only when the request supplies a
list (an empty list included). Any other value keeps the stored skills. The
identifier is always kept.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Union


class _Keep:
    def __repr__(self) -> str:
        return "KEEP"


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


KEEP = _Keep()
UNSET = _Unset()


@dataclass(frozen=True)
class SetTo:
    value: Any


FieldChange = Union[_Keep, SetTo, _Unset]

IMMUTABLE_FIELDS = frozenset({"_id"})
LIST_FIELDS = frozenset({"skills"})


def _classify_value(key: str, value: Any) -> FieldChange:
    if key in IMMUTABLE_FIELDS:
        return KEEP
    if key in LIST_FIELDS:
        return SetTo(list(value)) if isinstance(value, list) else KEEP
    if value is None or value == "":
        return UNSET
    return SetTo(value)


class JobPatch:
    def __init__(self, changes: Mapping[str, FieldChange] | None = None):
        # KEEP entries carry no information; drop them up front
        self._changes: Dict[str, FieldChange] = {
            k: v for k, v in (changes or {}).items() if v is not KEEP
        }

    @classmethod
    def from_request(cls, body: Mapping[str, Any]) -> "JobPatch":
        return cls({key: _classify_value(key, value) for key, value in body.items()})

    def classify(self, key: str) -> FieldChange:
        return self._changes.get(key, KEEP)

    @property
    def is_empty(self) -> bool:
        return not self._changes

    def to_update_document(self) -> Dict[str, Dict[str, Any]]:
        to_set = {k: c.value for k, c in self._changes.items() if isinstance(c, SetTo)}
        to_unset = {k: "" for k, c in self._changes.items() if c is UNSET}
        update: Dict[str, Dict[str, Any]] = {}
        if to_set:
            update["$set"] = to_set
        if to_unset:
            update["$unset"] = to_unset
        return update

    def apply(self, document: Mapping[str, Any]) -> Dict[str, Any]:
        """Return a copy of ``document`` with the patch applied."""
        result = dict(document)
        for key, change in self._changes.items():
            if isinstance(change, SetTo):
                result[key] = change.value
            else:
                result.pop(key, None)
        return result

    def __repr__(self) -> str:
        return f"JobPatch({self._changes!r})"
