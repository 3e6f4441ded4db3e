from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .context import EvaluationContext
from .errors import PathEvaluationError
from .loader import BlockList, BlockRule, FieldCondition
from .paths import DottedPathEvaluator, PathEvaluator
from .primitives import is_primitive
from .providers import RuleProvider
from .utils import equals_ignore_case, resource_type_of, value_as_string

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    """Result of evaluating one field condition."""

    MATCHED = "matched"
    MISMATCH = "mismatch"
    ERROR = "error"
    AMBIGUOUS = "ambiguous"
    NON_PRIMITIVE = "non_primitive"


@dataclass(frozen=True)
class Decision:
    """The result of ``BlockRuleEvaluator.explain()``.

    Attributes:
        blocked: Whether MDM matching is blocked for the record. Always
            equal to ``is_mdm_matching_blocked()`` for the same record and
            block list.
        resource_type: The record's type discriminator, or ``None`` if the
            record has none.
        rule_index: Position in the block list of the first rule that
            blocked, or ``None``.
        explanation: Evaluation breakdown. Structure:
            ``{"blocked": bool, "configured": bool, "resource_type": str | None,
            "metrics": dict, "rules": list}``
    """

    blocked: bool
    resource_type: str | None
    rule_index: int | None = None
    explanation: dict[str, Any] | None = None


class BlockRuleEvaluator:
    """Decides whether MDM matching is blocked for a record.

    Rules from the provider's block list are OR'd: the first rule whose
    resource type equals the record's and whose field conditions all
    match blocks matching. A condition matches only when its path yields
    exactly one primitive value equal, ignoring case, to the blocked value.

    Evaluation fails open. A missing provider or block list, a record
    without a type, a path that raises, a path that yields zero or several
    values, and a structured value all mean "does not block". No exception
    escapes ``is_mdm_matching_blocked()``.

    Instances hold no per-call state and may be shared between threads,
    provided the provider and evaluator are safe for concurrent reads.

    Example:
        >>> from mdmblock import StaticRuleProvider, load_block_list
        >>> rules = load_block_list({"blocklist": [{"resourceType": "Patient",
        ...     "fields": [{"fhirPath": "name.family", "value": "Smith"}]}]})
        >>> svc = BlockRuleEvaluator(StaticRuleProvider(rules))
        >>> svc.is_mdm_matching_blocked({"resourceType": "Patient", "name": [{"family": "SMITH"}]})
        True
    """

    def __init__(self, provider: RuleProvider | None = None, evaluator: PathEvaluator | None = None) -> None:
        """Initialize the evaluator.

        Args:
            provider: Source of the block list. If ``None``, matching is
                never blocked.
            evaluator: Path expression evaluator. If ``None``, uses
                ``DottedPathEvaluator``.
        """
        self.provider = provider
        self.evaluator = evaluator or DottedPathEvaluator()

    def is_mdm_matching_blocked(self, record: Any) -> bool:
        """Return ``True`` if any applicable block rule matches ``record``."""
        block_list = self._get_block_list()
        if block_list is None:
            return False
        ctx = self._new_context(record)
        if ctx is None:
            return False

        for rule in block_list.rules_for(ctx.resource_type):
            if self._rule_blocks(ctx, rule):
                return True
        return False

    def rule_blocks(self, record: Any, rule: BlockRule) -> bool:
        """Return ``True`` if every field condition of ``rule`` matches.

        A rule with no field conditions blocks unconditionally. The
        record's type is not checked against the rule here.
        """
        ctx = EvaluationContext(record=record, resource_type=rule.resource_type)
        return self._rule_blocks(ctx, rule)

    def explain(self, record: Any) -> Decision:
        """Evaluate ``record`` and report the outcome of every condition.

        Unlike ``is_mdm_matching_blocked()``, every applicable rule is
        evaluated, so the explanation covers rules after the first one
        that blocks. Within a rule, conditions still stop at the first
        one that does not match.
        """
        block_list = self._get_block_list()
        resource_type = self._resource_type(record)
        explanation: dict[str, Any] = {
            "blocked": False,
            "configured": block_list is not None,
            "resource_type": resource_type,
            "metrics": {},
            "rules": [],
        }
        if block_list is None or resource_type is None:
            return Decision(blocked=False, resource_type=resource_type, explanation=explanation)

        ctx = EvaluationContext(record=record, resource_type=resource_type)
        rule_index = None
        for index, rule in enumerate(block_list.rules):
            if rule.resource_type != resource_type:
                continue
            ctx.bump("rule_eval")
            fields = []
            blocked = True
            for condition in rule.fields:
                outcome = self._check(ctx, condition)
                fields.append(
                    {"path": condition.path, "blocked_value": condition.blocked_value, "outcome": outcome.value}
                )
                if outcome is not Outcome.MATCHED:
                    blocked = False
                    break
            if blocked and rule_index is None:
                rule_index = index
            explanation["rules"].append({"index": index, "blocked": blocked, "fields": fields})

        explanation["blocked"] = rule_index is not None
        explanation["metrics"] = dict(ctx.metrics)
        return Decision(
            blocked=rule_index is not None,
            resource_type=resource_type,
            rule_index=rule_index,
            explanation=explanation,
        )

    def _get_block_list(self) -> BlockList | None:
        if self.provider is None:
            return None
        try:
            return self.provider.get_block_list()
        except Exception:
            logger.warning("Block list could not be loaded. No blocking will be applied.", exc_info=True)
            return None

    def _new_context(self, record: Any) -> EvaluationContext | None:
        resource_type = self._resource_type(record)
        if resource_type is None:
            return None
        return EvaluationContext(record=record, resource_type=resource_type)

    @staticmethod
    def _resource_type(record: Any) -> str | None:
        try:
            resource_type = resource_type_of(record)
        except Exception:
            logger.warning("Record type could not be determined. No blocking will be applied.", exc_info=True)
            return None
        if resource_type is None:
            logger.warning("Record has no resource type. No blocking will be applied.")
        return resource_type

    def _rule_blocks(self, ctx: EvaluationContext, rule: BlockRule) -> bool:
        ctx.bump("rule_eval")
        # Conditions are AND'd: any reason not to block wins.
        for condition in rule.fields:
            if self._check(ctx, condition) is not Outcome.MATCHED:
                return False
        return True

    def _check(self, ctx: EvaluationContext, condition: FieldCondition) -> Outcome:
        ctx.bump("field_eval")
        path = condition.path
        try:
            results = list(self.evaluator.evaluate(ctx.record, path))
        except PathEvaluationError:
            logger.warning(
                "Path %s could not be evaluated. No blocking will be applied and mdm matching will continue.",
                path,
                exc_info=True,
            )
            ctx.bump(Outcome.ERROR.value)
            return Outcome.ERROR
        except Exception:
            logger.warning(
                "Path evaluator failed on %s. No blocking will be applied and mdm matching will continue.",
                path,
                exc_info=True,
            )
            ctx.bump(Outcome.ERROR.value)
            return Outcome.ERROR

        # Blocking is only defined for exactly one value.
        if len(results) != 1:
            logger.debug("Path %s yielded %d values; no blocking.", path, len(results))
            ctx.bump(Outcome.AMBIGUOUS.value)
            return Outcome.AMBIGUOUS

        value = results[0]
        try:
            type_tag = self.evaluator.type_tag(value)
            primitive = is_primitive(type_tag)
            text = value_as_string(value) if primitive else None
        except Exception:
            logger.warning("Value at path %s could not be inspected; no blocking.", path, exc_info=True)
            ctx.bump(Outcome.ERROR.value)
            return Outcome.ERROR

        if not primitive:
            logger.warning(
                "Path %s yields a non-primitive value (%s); blocking is only supported on primitive field types.",
                path,
                type_tag,
            )
            ctx.bump(Outcome.NON_PRIMITIVE.value)
            return Outcome.NON_PRIMITIVE

        if text is None or not equals_ignore_case(text, condition.blocked_value):
            logger.debug("Value at path %s does not match; no blocking.", path)
            ctx.bump(Outcome.MISMATCH.value)
            return Outcome.MISMATCH

        return Outcome.MATCHED
