from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from functools import lru_cache
from typing import Any

from .errors import PathEvaluationError
from .utils import resource_type_of


class PathEvaluator:
    """Base class for path expression evaluators.

    An evaluator selects field values from a record. The block rule
    evaluator only relies on this interface, so any expression engine can
    be plugged in by subclassing and overriding ``evaluate()`` (and
    ``type_tag()`` if the engine's values carry their own type).
    """

    def evaluate(self, record: Any, path: str) -> list[Any]:
        """Evaluate ``path`` against ``record``.

        Args:
            record: The record to inspect.
            path: The path expression.

        Returns:
            list: Every value selected by the expression, possibly empty.

        Raises:
            PathEvaluationError: If the expression is malformed or
                unsupported.
            NotImplementedError: If not overridden by a subclass.
        """
        raise NotImplementedError

    def type_tag(self, value: Any) -> str:
        """Return the type tag of a value produced by ``evaluate()``."""
        return infer_type_tag(value)


def infer_type_tag(value: Any) -> str:
    """Infer a FHIR type tag for a value taken from a JSON-like record.

    Values exposing ``fhir_type`` (attribute or method) are tagged by it.
    Otherwise the Python type decides: ``bool`` -> ``"boolean"``, ``int``
    -> ``"integer"``, ``float``/``Decimal`` -> ``"decimal"``, ``str`` ->
    ``"string"``, ``datetime`` -> ``"dateTime"``, ``date`` -> ``"date"``,
    ``time`` -> ``"time"``. Mappings are ``"object"``, lists ``"list"``
    and ``None`` is ``"null"``; none of these are primitive.

    Examples:
        >>> infer_type_tag(True)
        'boolean'
        >>> infer_type_tag({"family": "Smith"})
        'object'
    """
    tag = getattr(value, "fhir_type", None)
    if callable(tag):
        tag = tag()
    if isinstance(tag, str) and tag:
        return tag
    # bool before int, datetime before date: both are subclasses.
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, (float, Decimal)):
        return "decimal"
    if isinstance(value, str):
        return "string"
    if isinstance(value, datetime):
        return "dateTime"
    if isinstance(value, date):
        return "date"
    if isinstance(value, time):
        return "time"
    if value is None:
        return "null"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "list"
    return type(value).__name__


_MEMBER = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)(?:\[(\d+)\])?$")
_FUNCTION = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\(\)$")

_FUNCTIONS = frozenset({"first", "last", "single", "count", "exists", "empty"})


@dataclass(frozen=True)
class _Step:
    kind: str  # "member" | "function"
    name: str
    index: int | None = None


@lru_cache(maxsize=256)
def parse_path(path: str) -> tuple[_Step, ...]:
    """Parse a dotted path expression into evaluation steps.

    Raises:
        PathEvaluationError: On empty paths, empty segments, malformed
            indexers or unsupported functions.
    """
    if not isinstance(path, str) or not path.strip():
        raise PathEvaluationError("path expression must be a non-empty string")

    steps: list[_Step] = []
    for segment in path.strip().split("."):
        segment = segment.strip()
        if not segment:
            raise PathEvaluationError(f"empty segment in path '{path}'")
        m = _MEMBER.match(segment)
        if m:
            index = int(m.group(2)) if m.group(2) is not None else None
            steps.append(_Step(kind="member", name=m.group(1), index=index))
            continue
        m = _FUNCTION.match(segment)
        if m:
            name = m.group(1)
            if name not in _FUNCTIONS:
                raise PathEvaluationError(f"unsupported function '{name}()' in path '{path}'")
            steps.append(_Step(kind="function", name=name))
            continue
        raise PathEvaluationError(f"malformed segment '{segment}' in path '{path}'")
    return tuple(steps)


class DottedPathEvaluator(PathEvaluator):
    """Evaluate a small FHIRPath subset against JSON-like records.

    Supported syntax:
        - Member access: ``name.family``
        - Leading resource type: ``Patient.name.family`` is the same as
          ``name.family`` when the record is a Patient
        - Indexers: ``name[0].given[1]``
        - Functions: ``first()``, ``last()``, ``single()``, ``count()``,
          ``exists()``, ``empty()``

    Path resolution rules:
        - Every step works on a collection; lists are flattened
        - A missing member, ``None`` or a non-mapping item yields nothing
          rather than an error
        - An out-of-range index yields an empty collection
        - ``single()`` raises ``PathEvaluationError`` on more than one item

    Examples:
        >>> ev = DottedPathEvaluator()
        >>> ev.evaluate({"resourceType": "Patient", "name": [{"family": "Smith"}]}, "name.family")
        ['Smith']
        >>> ev.evaluate({"name": [{"given": ["A", "B"]}]}, "name.given")
        ['A', 'B']
    """

    def evaluate(self, record: Any, path: str) -> list[Any]:
        steps = parse_path(path)
        kind = resource_type_of(record)
        first = steps[0]
        if (
            len(steps) > 1
            and first.kind == "member"
            and first.index is None
            and first.name == kind
        ):
            steps = steps[1:]

        collection: list[Any] = [record]
        for step in steps:
            if step.kind == "member":
                collection = self._member(collection, step.name)
                if step.index is not None:
                    collection = collection[step.index : step.index + 1]
            else:
                collection = self._function(collection, step.name, path)
        return collection

    @staticmethod
    def _member(collection: list[Any], name: str) -> list[Any]:
        out: list[Any] = []
        for item in collection:
            if not isinstance(item, Mapping) or name not in item:
                continue
            value = item[name]
            if isinstance(value, (list, tuple)):
                out.extend(v for v in value if v is not None)
            elif value is not None:
                out.append(value)
        return out

    @staticmethod
    def _function(collection: list[Any], name: str, path: str) -> list[Any]:
        if name == "first":
            return collection[:1]
        if name == "last":
            return collection[-1:]
        if name == "single":
            if len(collection) > 1:
                raise PathEvaluationError(
                    f"single() found {len(collection)} items in path '{path}'"
                )
            return collection
        if name == "count":
            return [len(collection)]
        if name == "exists":
            return [bool(collection)]
        if name == "empty":
            return [not collection]
        raise PathEvaluationError(f"unsupported function '{name}()' in path '{path}'")
