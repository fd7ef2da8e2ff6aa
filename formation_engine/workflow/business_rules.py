"""
Business rules for freezone company formation.

Pure functions over a loaded FormConfigDefinition. Each returns a
ValidationResult carrying every violated rule, never just the first one,
because the client renders all messages together.
"""

import math
import re
from typing import Any, Dict, Iterable, Optional, Sequence

from .models import ValidationResult


def contains_banned_token(name: str, token: str, case_sensitive: bool = True) -> bool:
    """Substring match of ``token`` anywhere in ``name``.

    "UAEnergy" contains "UAE". Word-boundary matching would go here.
    """
    if not case_sensitive:
        return token.lower() in name.lower()
    return token in name


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _amount(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def validate_company_name(config, name: Optional[str]) -> ValidationResult:
    if _blank(name):
        return ValidationResult.from_errors(["Name is required"])

    errors = []
    banned = config.validation_rules.banned_words
    for token in banned.tokens:
        if contains_banned_token(name, token, banned.case_sensitive):
            errors.append(f"Name cannot contain '{token}'")

    min_length = config.validation_rules.name_restrictions.single_word_min_length
    words = name.strip().split()
    if len(words) == 1 and len(words[0]) < min_length:
        errors.append(f"Single word names must be at least {min_length} characters")

    return ValidationResult.from_errors(errors)


def validate_activities_selection(config, selected: Optional[Sequence[Any]], main: Any) -> ValidationResult:
    selected = list(selected or [])
    errors = []

    if not selected:
        errors.append("At least one activity must be selected")
    if _blank(main):
        errors.append("Main activity must be selected")
    elif main not in selected:
        errors.append("Main activity must be one of the selected activities")

    max_activities = config.max_activities_count
    if len(selected) > max_activities:
        errors.append(f"Maximum {max_activities} activities allowed")

    return ValidationResult.from_errors(errors)


def validate_visa_package(config, visa_count: int, partner_visa_count: int = 0) -> ValidationResult:
    errors = []
    min_visas = config.min_visa_package
    max_visas = config.max_visa_package

    if visa_count < min_visas:
        errors.append(f"Minimum {min_visas} visa required")
    if visa_count > max_visas:
        errors.append(f"Maximum {max_visas} visas allowed")
    if partner_visa_count > visa_count:
        errors.append("Partner visa count cannot exceed total visa package")

    return ValidationResult.from_errors(errors)


def validate_share_capital(config, amount: float, partner_visa_count: int = 0) -> ValidationResult:
    errors = []

    min_capital = config.min_share_capital
    if amount < min_capital:
        errors.append(f"Minimum share capital is {_amount(min_capital)} AED")

    if partner_visa_count > 0:
        multiplier = config.partner_visa_capital_multiplier
        required_capital = partner_visa_count * multiplier
        if amount < required_capital:
            errors.append(
                f"Partner visas require minimum {_amount(required_capital)} AED share capital "
                f"({_amount(multiplier)} AED per visa)"
            )

    return ValidationResult.from_errors(
        errors, requires_bank_letter=amount > config.max_share_capital_without_bank_letter
    )


def activity_fee_units(config, selected: Iterable[Any]) -> int:
    """ Number of selected activities charged on top of the free allowance. """
    return max(0, len(list(selected or [])) - config.free_activities_count)


_LEADING_INT = re.compile(r"\s*[+-]?\d+")
_LEADING_FLOAT = re.compile(r"\s*[+-]?(?:\d+(?:\.\d+)?|\.\d+)(?:[eE][+-]?\d+)?")


def _count(value: Any) -> int:
    """ Leading integer of a form value; anything unparseable counts as 0. """
    if isinstance(value, bool) or _blank(value):
        return 0
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else 0
    found = _LEADING_INT.match(str(value))
    return int(found.group()) if found else 0


def _number(value: Any) -> float:
    """ Leading decimal of a form value, so "50,000" reads as 50. """
    if isinstance(value, bool) or _blank(value):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    found = _LEADING_FLOAT.match(str(value))
    return float(found.group()) if found else 0.0


def evaluate_rule(config, rule_name: str, data: Optional[Dict[str, Any]]) -> ValidationResult:
    """ Run one named rule with the loosely typed payload an API endpoint receives. """
    data = data or {}
    match rule_name:
        case "company_name":
            return validate_company_name(config, data.get("name"))
        case "activities":
            return validate_activities_selection(
                config, data.get("selected_activities") or [], data.get("main_activity")
            )
        case "visa_package":
            return validate_visa_package(
                config, _count(data.get("visa_count")), _count(data.get("partner_visa_count"))
            )
        case "share_capital":
            return validate_share_capital(
                config, _number(data.get("amount")), _count(data.get("partner_visa_count"))
            )
        case _:
            return ValidationResult.from_errors(["Unknown validation type"])
