"""mdmblock - Block list evaluation for MDM matching.

mdmblock decides whether automated MDM matching (record linkage and
deduplication) must be suppressed for a record because a configured
block rule matches its field values.

Quick Start:
    >>> from mdmblock import BlockRuleEvaluator, StaticRuleProvider, load_block_list
    >>> block_list = load_block_list({
    ...     "blocklist": [{
    ...         "resourceType": "Patient",
    ...         "fields": [{"fhirPath": "name.family", "value": "Smith"}],
    ...     }]
    ... })
    >>> svc = BlockRuleEvaluator(StaticRuleProvider(block_list))
    >>> svc.is_mdm_matching_blocked({"resourceType": "Patient", "name": [{"family": "SMITH"}]})
    True

Main Components:
    - BlockRuleEvaluator: Main entry point; ``is_mdm_matching_blocked()``
    - load_block_list(): Load and validate a block list from dict, JSON string, or file
    - RuleProvider: Source of the block list (StaticRuleProvider, FileRuleProvider)
    - PathEvaluator: Path expression engine (DottedPathEvaluator by default)
    - is_primitive(): Whether a type tag names a comparable scalar type

Semantics:
    - Rules are OR'd; the field conditions of a rule are AND'd
    - A condition matches when its path yields exactly one primitive value
      equal, ignoring case, to the blocked value
    - Everything else fails open: matching is not blocked

Exceptions:
    - BlockListLoadError: Block list loading or validation failed
    - PathEvaluationError: A path expression is malformed or unsupported
"""

from .engine import BlockRuleEvaluator, Decision, Outcome
from .errors import BlockListLoadError, MdmBlockError, PathEvaluationError
from .loader import BlockList, BlockRule, FieldCondition, load_block_list
from .paths import DottedPathEvaluator, PathEvaluator
from .primitives import PrimitiveType, is_primitive
from .providers import FileRuleProvider, RuleProvider, StaticRuleProvider

__all__ = [
    "BlockList",
    "BlockListLoadError",
    "BlockRule",
    "BlockRuleEvaluator",
    "Decision",
    "DottedPathEvaluator",
    "FieldCondition",
    "FileRuleProvider",
    "MdmBlockError",
    "Outcome",
    "PathEvaluationError",
    "PathEvaluator",
    "PrimitiveType",
    "RuleProvider",
    "StaticRuleProvider",
    "is_primitive",
    "load_block_list",
]
