from __future__ import annotations

import enum
import logging
from typing import Iterable, List, Tuple

from .models import AtRule, Rule, RulePartition, Selector

logger = logging.getLogger(__name__)


class AttributePolicy(str, enum.Enum):
    """How selectors with attribute predicates (``[type=radio]``) are handled.

    PRESERVE keeps them in the stylesheet only, since the attribute may change
    after rendering. INLINE treats them like any static selector. BOTH inlines
    them and also keeps them in the stylesheet.
    """

    PRESERVE = "preserve"
    INLINE = "inline"
    BOTH = "both"

    @classmethod
    def coerce(cls, value: "AttributePolicy | str") -> "AttributePolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(policy.value for policy in cls)
            raise ValueError(f"Unknown attribute policy {value!r}, expected one of: {choices}") from None


def classify_selector(selector: Selector, policy: AttributePolicy = AttributePolicy.PRESERVE) -> Tuple[bool, bool]:
    """Return (inline, preserve) for one selector."""
    if selector.has_pseudo or not selector.valid:
        return False, True
    if selector.has_attribute:
        if policy is AttributePolicy.INLINE:
            return True, False
        if policy is AttributePolicy.BOTH:
            return True, True
        return False, True
    return True, False


def partition_rules(
    rules: Iterable[Rule],
    policy: AttributePolicy = AttributePolicy.PRESERVE,
) -> RulePartition:
    """Split rules into those that can be inlined and those kept in a stylesheet.

    At-rules are always preserved whole. Style rules are split per selector,
    so a rule such as ``p, a:hover {...}`` yields ``p {...}`` for inlining and
    ``a:hover {...}`` for the stylesheet. Document order is kept on both sides.
    """
    partition = RulePartition()
    for rule in rules:
        if isinstance(rule, AtRule):
            partition.preserve.append(rule)
            continue

        inline: List[Selector] = []
        preserve: List[Selector] = []
        for selector in rule.selectors:
            to_inline, to_preserve = classify_selector(selector, policy)
            if to_inline:
                inline.append(selector)
            if to_preserve:
                preserve.append(selector)

        if inline:
            partition.inline.append(rule.with_selectors(inline))
        if preserve:
            partition.preserve.append(rule.with_selectors(preserve))

    logger.debug("Partitioned rules: %s", partition.summary())
    return partition
