"""
Admission rule data models.
"""

from typing import List, Optional, Union
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class RuleAction(str, Enum):
    """Rule action types."""
    ALLOW = "allow"
    DENY = "deny"


class RuleConditionOperator(str, Enum):
    """Operators applied to the request key."""
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    IN = "in"
    NOT_IN = "not_in"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    MATCHES = "matches"


@dataclass
class AdmissionRule:
    """Admission rule matched against a request key."""
    rule_id: str
    name: str
    operator: RuleConditionOperator
    value: Union[str, List[str]]
    action: RuleAction = RuleAction.DENY
    priority: int = 0
    enabled: bool = True
    description: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class AdmissionDecision:
    """Outcome of evaluating the admission rules for one key."""
    allowed: bool
    reason: Optional[str] = None
    matched_rules: List[str] = field(default_factory=list)


class AdmissionRuleSpec(BaseModel):
    """Declarative rule definition, as read from a rule file."""
    rule_id: str = Field(..., description="Rule ID")
    name: str = Field(..., description="Rule name")
    operator: RuleConditionOperator = Field(..., description="Operator applied to the request key")
    value: Union[str, List[str]] = Field(..., description="Operand")
    action: RuleAction = Field(RuleAction.DENY, description="Rule action")
    priority: int = Field(0, description="Rule priority")
    enabled: bool = Field(True, description="Whether rule is enabled")
    description: Optional[str] = Field(None, description="Rule description")

    def to_rule(self) -> AdmissionRule:
        return AdmissionRule(
            rule_id=self.rule_id,
            name=self.name,
            operator=self.operator,
            value=self.value,
            action=self.action,
            priority=self.priority,
            enabled=self.enabled,
            description=self.description,
        )


class AdmissionRuleFile(BaseModel):
    """Top-level layout of a rule file."""
    default_action: Optional[RuleAction] = None
    rules: List[AdmissionRuleSpec] = Field(default_factory=list)
