"""
Loading admission rules from YAML rule files.

Expected layout::

    default_action: allow
    rules:
      - rule_id: deny-forbidden
        name: Deny forbidden keys
        operator: contains
        value: forbidden
        action: deny
        priority: 100
"""

from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError

from shared.errors import ConfigurationError
from shared.logging import get_logger
from .engine import RuleBasedAdmissionPolicy
from .models import AdmissionRuleFile, RuleAction

logger = get_logger("mediator.policy.loader")


def load_rules(
    path: Union[str, Path],
    default_action: Optional[RuleAction] = None,
) -> RuleBasedAdmissionPolicy:
    """Build a rule-based policy from a YAML file.

    ``default_action`` from the file wins over the argument; with neither set
    unmatched keys are admitted.
    """
    rule_path = Path(path)
    if not rule_path.exists():
        raise ConfigurationError("Admission rule file not found", {"path": str(rule_path)})

    try:
        with rule_path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle) or {}
        rule_file = AdmissionRuleFile.model_validate(payload)
    except (yaml.YAMLError, ValidationError) as e:
        raise ConfigurationError(
            "Invalid admission rule file",
            {"path": str(rule_path), "error": str(e)}
        ) from e

    action = rule_file.default_action or default_action or RuleAction.ALLOW
    policy = RuleBasedAdmissionPolicy(default_action=action)
    for spec in rule_file.rules:
        policy.add_rule(spec.to_rule())

    logger.info("Admission rules loaded", path=str(rule_path), rules=len(rule_file.rules))
    return policy
