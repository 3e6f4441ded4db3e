from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime, time
from typing import Any


def resource_type_of(record: Any) -> str | None:
    """Return the type discriminator of a record, or ``None`` if it has none.

    Lookup order:
        - Mapping: the ``"resourceType"`` key (FHIR JSON shape)
        - Object: a ``resource_type`` attribute
        - Object: a ``fhir_type()`` method or ``fhir_type`` attribute

    Only a non-empty string counts as a discriminator.

    Examples:
        >>> resource_type_of({"resourceType": "Patient"})
        'Patient'
        >>> resource_type_of({"name": []}) is None
        True
    """
    if isinstance(record, Mapping):
        kind = record.get("resourceType")
    else:
        kind = getattr(record, "resource_type", None)
        if not isinstance(kind, str):
            kind = getattr(record, "fhir_type", None)
            if callable(kind):
                kind = kind()
    if isinstance(kind, str) and kind:
        return kind
    return None


def value_as_string(value: Any) -> str | None:
    """Render a scalar value the way it appears in a FHIR JSON document.

    Args:
        value: A primitive value returned by a path evaluator.

    Returns:
        The string used when comparing against a blocked value, or ``None``
        if the value has no string form.

    Rendering rules:
        - Objects with a ``value_as_string()`` method: its result (``None`` stays ``None``)
        - ``bool``: ``"true"`` / ``"false"``
        - ``datetime``/``date``/``time``: ISO 8601
        - Anything else: ``str(value)``

    Examples:
        >>> value_as_string(True)
        'true'
        >>> value_as_string(date(1990, 1, 1))
        '1990-01-01'
    """
    as_string = getattr(value, "value_as_string", None)
    if callable(as_string):
        text = as_string()
        return None if text is None else str(text)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def equals_ignore_case(left: str, right: str) -> bool:
    """Compare two strings without regard to case.

    Characters are compared one by one, so strings of different length
    never match: ``"STRASSE"`` does not equal ``"Straße"``.
    """
    if len(left) != len(right):
        return False
    return all(
        a == b or a.upper() == b.upper() or a.upper().lower() == b.upper().lower()
        for a, b in zip(left, right)
    )
