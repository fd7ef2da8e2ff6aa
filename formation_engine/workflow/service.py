"""
Host-facing view of one freezone's form configuration.

Wraps a FormConfigLookup so API endpoints never touch an invalid
definition: every accessor degrades to an empty value or a
"Configuration not loaded" result when the freezone could not be resolved.
"""

from typing import Any, Dict, List, Optional

from . import business_rules as rules
from .form_config import FormConfigDefinition
from .models import ValidationResult
from .repository import FormConfigLookup, FormConfigRepository
from .schema import ActivityRules

_NOT_LOADED = "Configuration not loaded"


class FormConfigService:
    def __init__(self, lookup: FormConfigLookup):
        self.lookup = lookup

    @classmethod
    def for_freezone(cls, repository: FormConfigRepository, freezone_code: Optional[str]) -> "FormConfigService":
        return cls(repository.lookup(freezone_code))

    @property
    def freezone_code(self) -> str:
        return self.lookup.freezone_code

    @property
    def valid(self) -> bool:
        return self.lookup.valid

    @property
    def definition(self) -> Optional[FormConfigDefinition]:
        return self.lookup.definition

    def config(self) -> Dict[str, Any]:
        return self.definition.to_api_dict() if self.valid else {}

    @property
    def freezone_info(self) -> Dict[str, Any]:
        return self.config().get("freezone", {})

    @property
    def steps(self) -> List[Dict[str, Any]]:
        return self.config().get("steps", [])

    @property
    def components(self) -> Dict[str, Any]:
        return self.config().get("components", {})

    @property
    def business_rules(self) -> Dict[str, Any]:
        return self.config().get("business_rules", {})

    @property
    def validation_rules(self) -> Dict[str, Any]:
        return self.config().get("validation_rules", {})

    def to_api_dict(self) -> Dict[str, Any]:
        config = self.config()
        return {
            "freezone": config.get("freezone", {}),
            "steps": config.get("steps", []),
            "components": config.get("components", {}),
            "business_rules": config.get("business_rules", {}),
            "validation_rules": config.get("validation_rules", {}),
            "meta": {"version": config.get("meta", {}).get("version", "unknown")},
        }

    def validate_company_name(self, name: Optional[str]) -> ValidationResult:
        if not self.valid:
            return ValidationResult.from_errors([_NOT_LOADED])
        return rules.validate_company_name(self.definition, name)

    def validate_activities(self, selected, main) -> ValidationResult:
        if not self.valid:
            return ValidationResult.from_errors([_NOT_LOADED])
        return rules.validate_activities_selection(self.definition, selected, main)

    def validate_visa_package(self, visa_count: int, partner_visa_count: int = 0) -> ValidationResult:
        if not self.valid:
            return ValidationResult.from_errors([_NOT_LOADED])
        return rules.validate_visa_package(self.definition, visa_count, partner_visa_count)

    def validate_share_capital(self, amount: float, partner_visa_count: int = 0) -> ValidationResult:
        if not self.valid:
            return ValidationResult.from_errors([_NOT_LOADED])
        return rules.validate_share_capital(self.definition, amount, partner_visa_count)

    def validate(self, rule_name: str, data: Optional[Dict[str, Any]] = None) -> ValidationResult:
        if not self.valid:
            return ValidationResult.from_errors([_NOT_LOADED])
        return rules.evaluate_rule(self.definition, rule_name, data)

    @property
    def free_activities_count(self) -> int:
        if not self.valid:
            return ActivityRules().free_activities_count
        return self.definition.free_activities_count

    @property
    def max_activities_count(self) -> int:
        if not self.valid:
            return ActivityRules().max_activities_count
        return self.definition.max_activities_count

    def requires_bank_letter(self, amount: float) -> bool:
        if not self.valid:
            return False
        return amount > self.definition.max_share_capital_without_bank_letter

    def partner_visa_capital_requirement(self, partner_visa_count: int):
        if not self.valid:
            return 0
        return partner_visa_count * self.definition.partner_visa_capital_multiplier
