"""
Admission policies for the Access Mediator.

An admission policy is any callable taking the request key and returning
``True`` to admit it. The classes here are the built-in policies; plain
functions and lambdas work just as well.
"""

import re
from typing import Any, Callable, Dict, Iterable, List, Optional

from shared.logging import get_logger
from .models import (
    AdmissionRule, RuleConditionOperator, RuleAction, AdmissionDecision
)

AdmissionPolicy = Callable[[str], bool]


def _members(value: Any) -> Iterable[str]:
    """A single string value is a one-element set, not a substring source."""
    if isinstance(value, str):
        return (value,)
    return value


class AllowAllPolicy:
    """Admits every request key."""

    def __call__(self, request_key: str) -> bool:
        return True


class SubstringDenyPolicy:
    """Denies request keys containing any of the configured substrings."""

    def __init__(self, substrings: Iterable[str] = ("forbidden",)):
        self.substrings = tuple(substrings)
        self.logger = get_logger("mediator.policy.substring")

    def __call__(self, request_key: str) -> bool:
        for substring in self.substrings:
            if substring in request_key:
                self.logger.debug("Admission denied", request_key=request_key, matched=substring)
                return False
        return True


class RuleBasedAdmissionPolicy:
    """Priority-ordered rule evaluation over request keys."""

    def __init__(self, default_action: RuleAction = RuleAction.ALLOW):
        self.logger = get_logger("mediator.policy.rules")
        self.default_action = RuleAction(default_action)
        self.rules: Dict[str, AdmissionRule] = {}
        self._ordered: Optional[List[AdmissionRule]] = None

    def __call__(self, request_key: str) -> bool:
        return self.evaluate(request_key).allowed

    def add_rule(self, rule: AdmissionRule) -> None:
        """Add (or replace) a rule."""
        self.rules[rule.rule_id] = rule
        self._invalidate_cache()
        self.logger.info("Rule added", rule_id=rule.rule_id, name=rule.name)

    def remove_rule(self, rule_id: str) -> bool:
        """Remove a rule."""
        if rule_id in self.rules:
            rule = self.rules.pop(rule_id)
            self._invalidate_cache()
            self.logger.info("Rule removed", rule_id=rule_id, name=rule.name)
            return True
        return False

    def update_rule(self, rule: AdmissionRule) -> bool:
        """Update an existing rule."""
        if rule.rule_id in self.rules:
            self.rules[rule.rule_id] = rule
            self._invalidate_cache()
            self.logger.info("Rule updated", rule_id=rule.rule_id, name=rule.name)
            return True
        return False

    def get_rule(self, rule_id: str) -> Optional[AdmissionRule]:
        """Get a rule by ID."""
        return self.rules.get(rule_id)

    def list_rules(self) -> List[AdmissionRule]:
        """Enabled rules, highest priority first."""
        if self._ordered is None:
            ordered = [rule for rule in self.rules.values() if rule.enabled]
            ordered.sort(key=lambda r: r.priority, reverse=True)
            self._ordered = ordered
        return self._ordered

    def evaluate(self, request_key: str) -> AdmissionDecision:
        """Evaluate rules against a request key; the first match decides."""
        for rule in self.list_rules():
            if self._matches(rule, request_key):
                decision = AdmissionDecision(
                    allowed=(rule.action == RuleAction.ALLOW),
                    reason=f"Rule '{rule.name}' matched",
                    matched_rules=[rule.rule_id]
                )
                self.logger.debug(
                    "Rule evaluation result",
                    rule_id=rule.rule_id,
                    request_key=request_key,
                    allowed=decision.allowed
                )
                return decision

        return AdmissionDecision(
            allowed=(self.default_action == RuleAction.ALLOW),
            reason="No applicable rules matched"
        )

    def _matches(self, rule: AdmissionRule, request_key: str) -> bool:
        """Evaluate a single rule operator against the key."""
        operator = rule.operator
        value = rule.value

        try:
            if operator == RuleConditionOperator.EQUALS:
                return request_key == value

            elif operator == RuleConditionOperator.NOT_EQUALS:
                return request_key != value

            elif operator == RuleConditionOperator.IN:
                return request_key in _members(value)

            elif operator == RuleConditionOperator.NOT_IN:
                return request_key not in _members(value)

            elif operator == RuleConditionOperator.CONTAINS:
                return str(value) in request_key

            elif operator == RuleConditionOperator.STARTS_WITH:
                return request_key.startswith(str(value))

            elif operator == RuleConditionOperator.ENDS_WITH:
                return request_key.endswith(str(value))

            elif operator == RuleConditionOperator.MATCHES:
                return re.search(str(value), request_key) is not None

            else:
                self.logger.warning("Unknown rule operator", operator=operator)
                return False

        except (TypeError, re.error) as e:
            self.logger.error("Error evaluating rule", rule_id=rule.rule_id, error=str(e))
            return False

    def _invalidate_cache(self):
        self._ordered = None

    def get_engine_stats(self) -> Dict[str, Any]:
        """Get engine statistics."""
        return {
            "total_rules": len(self.rules),
            "enabled_rules": len([r for r in self.rules.values() if r.enabled]),
            "default_action": self.default_action.value,
            "deny_rules": len([r for r in self.rules.values() if r.action == RuleAction.DENY]),
        }

    def clear_all_rules(self):
        """Clear all rules."""
        self.rules.clear()
        self._invalidate_cache()
        self.logger.info("All rules cleared")
