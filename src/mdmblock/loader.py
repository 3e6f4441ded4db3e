from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import BlockListLoadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldCondition:
    """A single field check inside a block rule.

    Attributes:
        path: Path expression selecting the field from the record,
            e.g. ``"name.family"``.
        blocked_value: Value that, compared case-insensitively with the
            field's single value, makes this condition match.
    """

    path: str
    blocked_value: str


@dataclass(frozen=True)
class BlockRule:
    """A set of field conditions for one resource type.

    All conditions must match for the rule to block matching. A rule
    without conditions blocks every record of its resource type.

    Attributes:
        resource_type: Record type the rule applies to, e.g. ``"Patient"``.
        fields: The conditions, evaluated in order.
    """

    resource_type: str
    fields: tuple[FieldCondition, ...] = ()


@dataclass(frozen=True)
class BlockList:
    """The configured block rules. Rules are OR'd together.

    This is a frozen (immutable) dataclass; it can be shared between
    threads evaluating different records.
    """

    rules: tuple[BlockRule, ...] = ()

    def rules_for(self, resource_type: str) -> list[BlockRule]:
        """Return the rules whose resource type equals ``resource_type``.

        Matching is exact and case-sensitive. Original order is kept.
        """
        return [r for r in self.rules if r.resource_type == resource_type]


def load_block_list(source: Any, *, base_dir: str | None = None) -> BlockList:
    """Load and validate a block list from a dict, JSON string, or file path.

    Args:
        source: Block list source. Can be:
            - A ``dict`` with the block list document
            - A JSON string (detected by leading ``{`` after stripping whitespace)
            - A file path (``str`` or ``Path``) to a JSON file
        base_dir: Base directory for resolving relative file paths. Only
            used when ``source`` is a relative path.

    Returns:
        A validated ``BlockList``.

    Raises:
        BlockListLoadError: If the source cannot be loaded, parsed, or fails
            validation. Wraps underlying ``json.JSONDecodeError`` and
            ``OSError`` exceptions.

    Document format::

        {"blocklist": [
            {"resourceType": "Patient",
             "fields": [{"fhirPath": "name.family", "value": "Smith"}]}
        ]}

    ``path`` and ``blockedValue`` are accepted in place of ``fhirPath``
    and ``value``.

    Examples:
        >>> load_block_list({"blocklist": []})
        BlockList(rules=())
    """
    try:
        if isinstance(source, (str, Path)):
            text = str(source)
            if text.strip().startswith("{"):
                data = json.loads(text)
            else:
                path = Path(text)
                if not path.is_absolute() and base_dir:
                    path = Path(base_dir) / path
                data = json.loads(path.read_text(encoding="utf-8"))
        elif isinstance(source, dict):
            data = source
        else:
            raise BlockListLoadError(f"Unsupported block list source type: {type(source).__name__}")
    except (json.JSONDecodeError, OSError) as exc:
        raise BlockListLoadError(str(exc)) from exc

    if not isinstance(data, dict):
        raise BlockListLoadError("block list document must be a JSON object")
    items = data.get("blocklist")
    if not isinstance(items, list):
        raise BlockListLoadError("block list requires list 'blocklist'")

    return BlockList(rules=tuple(_parse_rule(item, i) for i, item in enumerate(items)))


def _parse_rule(item: Any, position: int) -> BlockRule:
    if not isinstance(item, dict):
        raise BlockListLoadError(f"rule #{position} must be an object")
    resource_type = item.get("resourceType")
    if not isinstance(resource_type, str) or not resource_type.strip():
        raise BlockListLoadError(f"rule #{position} requires non-empty 'resourceType'")
    fields = item.get("fields")
    if fields is None:
        fields = []
    if not isinstance(fields, list):
        raise BlockListLoadError(f"rule #{position} 'fields' must be a list")

    conditions = tuple(_parse_field(f, position) for f in fields)
    if not conditions:
        logger.warning(
            "Block rule #%d for %s has no fields and will block every %s record.",
            position,
            resource_type,
            resource_type,
        )
    return BlockRule(resource_type=resource_type.strip(), fields=conditions)


def _parse_field(item: Any, position: int) -> FieldCondition:
    if not isinstance(item, dict):
        raise BlockListLoadError(f"rule #{position} field must be an object")
    path = item.get("fhirPath", item.get("path"))
    value = item.get("value", item.get("blockedValue"))
    if not isinstance(path, str) or not path.strip():
        raise BlockListLoadError(f"rule #{position} field requires non-empty 'fhirPath'")
    if not isinstance(value, str):
        raise BlockListLoadError(f"rule #{position} field '{path}' requires string 'value'")
    return FieldCondition(path=path.strip(), blocked_value=value)
