from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class EvaluationContext:
    """State scoped to one block list evaluation.

    A context is created by ``BlockRuleEvaluator`` for every call and
    thrown away afterwards; nothing in it is shared between calls.

    Attributes:
        record: The record being evaluated.
        resource_type: The record's type discriminator.
        metrics: Counters for evaluation metrics. Keys include
            ``"rule_eval"``, ``"field_eval"`` and one counter per
            failure outcome (``"error"``, ``"ambiguous"``,
            ``"non_primitive"``, ``"mismatch"``).
    """

    record: Any
    resource_type: str
    metrics: dict[str, int] = field(default_factory=dict)

    def bump(self, metric: str, amount: int = 1) -> None:
        """Increment a metric counter."""
        self.metrics[metric] = self.metrics.get(metric, 0) + amount
