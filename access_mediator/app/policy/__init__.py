"""
Admission policy package.

A policy decides, from the request key alone, whether a request may proceed
past the mediator to the cache and delegate. Built-ins:

- SubstringDenyPolicy: denies keys containing a configured substring
  (the default denies "forbidden").
- AllowAllPolicy: admits everything.
- RuleBasedAdmissionPolicy: prioritized allow/deny rules, optionally
  loaded from YAML via load_rules.
"""

from .engine import AdmissionPolicy, AllowAllPolicy, SubstringDenyPolicy, RuleBasedAdmissionPolicy
from .loader import load_rules
from .models import AdmissionRule, AdmissionDecision, RuleAction, RuleConditionOperator

__all__ = [
    "AdmissionPolicy",
    "AllowAllPolicy",
    "SubstringDenyPolicy",
    "RuleBasedAdmissionPolicy",
    "load_rules",
    "AdmissionRule",
    "AdmissionDecision",
    "RuleAction",
    "RuleConditionOperator",
]
