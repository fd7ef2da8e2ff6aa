"""
Freezone company-formation form configuration.

A form document extends the workflow document with freezone details,
business rules and validation rules. Its steps are keyed by string id and
name the frontend component that renders them.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from . import business_rules as rules
from .compiler import mapping_section, present, read_document
from .errors import ConfigurationError
from .models import ValidationResult
from .schema import BusinessRules, FormStep, FreezoneInfo, ValidationRules, parse_model

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormConfigDefinition:
    name: str
    freezone: FreezoneInfo
    steps: Tuple[FormStep, ...]
    business_rules: BusinessRules = field(default_factory=BusinessRules)
    validation_rules: ValidationRules = field(default_factory=ValidationRules)
    components: Dict[str, Any] = field(default_factory=dict)
    internal_fields: Tuple[Any, ...] = ()
    application_states: Tuple[Any, ...] = ()
    workflow_type: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None

    @property
    def freezone_code(self) -> Optional[str]:
        return self.freezone.code

    @property
    def freezone_name(self) -> Optional[str]:
        return self.freezone.name

    @property
    def freezone_tagline(self) -> Optional[str]:
        return self.freezone.tagline

    # business rule accessors, defaults live on the schema models
    @property
    def free_activities_count(self) -> int:
        return self.business_rules.activities.free_activities_count

    @property
    def max_activities_count(self) -> int:
        return self.business_rules.activities.max_activities_count

    @property
    def min_share_capital(self):
        return self.business_rules.share_capital.min_amount

    @property
    def max_share_capital_without_bank_letter(self):
        return self.business_rules.share_capital.max_without_bank_letter

    @property
    def partner_visa_capital_multiplier(self):
        return self.business_rules.share_capital.partner_visa_capital_multiplier

    @property
    def min_visa_package(self) -> int:
        return self.business_rules.visas.min_package

    @property
    def max_visa_package(self) -> int:
        return self.business_rules.visas.max_package

    @property
    def establishment_card_required_when_visas(self) -> bool:
        return self.business_rules.visas.establishment_card_required_when_visas

    @property
    def banned_words(self):
        return self.validation_rules.banned_words

    @property
    def name_restrictions(self):
        return self.validation_rules.name_restrictions

    @property
    def file_upload_rules(self):
        return self.validation_rules.file_upload

    def component_config(self, component_name: str) -> Dict[str, Any]:
        return dict(self.components.get(str(component_name)) or {})

    def step_config(self, step_id: str) -> Dict[str, Any]:
        step = next((s for s in self.steps if s.id == str(step_id)), None)
        return step.model_dump(exclude_unset=True) if step else {}

    def step_component(self, step_id: str) -> Optional[str]:
        return self.step_config(step_id).get("component")

    def step_title(self, step_id: str) -> Optional[str]:
        return self.step_config(step_id).get("title")

    def step_subtitle(self, step_id: str) -> Optional[str]:
        return self.step_config(step_id).get("subtitle")

    def step_icon(self, step_id: str) -> Optional[str]:
        return self.step_config(step_id).get("icon")

    def validate_company_name(self, name: Optional[str]) -> ValidationResult:
        return rules.validate_company_name(self, name)

    def validate_activities_selection(self, selected, main) -> ValidationResult:
        return rules.validate_activities_selection(self, selected, main)

    def validate_visa_package(self, visa_count: int, partner_visa_count: int = 0) -> ValidationResult:
        return rules.validate_visa_package(self, visa_count, partner_visa_count)

    def validate_share_capital(self, amount: float, partner_visa_count: int = 0) -> ValidationResult:
        return rules.validate_share_capital(self, amount, partner_visa_count)

    def to_api_dict(self) -> Dict[str, Any]:
        """
        Projection served to the frontend form builder.

        ``steps`` and ``business_rules`` keep the document's own shape (with
        defaults filled in) so a consumer can parse them back unchanged.
        """
        return {
            "freezone": {
                "code": self.freezone_code,
                "name": self.freezone_name,
                "tagline": self.freezone_tagline,
            },
            "steps": [s.model_dump(exclude_unset=True) for s in self.steps],
            "components": dict(self.components),
            "business_rules": self.business_rules.model_dump(),
            "validation_rules": self.validation_rules.model_dump(),
            "internal_fields": list(self.internal_fields),
            "meta": {"version": self.version or "unknown"},
        }


def load_form_config(
    source: Union[str, bytes, Mapping[str, Any]], version: Optional[str] = None
) -> FormConfigDefinition:
    """
    Load a FormConfigDefinition from YAML text or a parsed document.

    ``version`` is an opaque marker (the source's modification time) that is
    echoed in the API projection.
    """
    data = read_document(source, kind="form")

    errors: List[str] = []
    if not present(data.get("workflow_type")):
        errors.append("Missing workflow_type")
    if not present(data.get("name")):
        errors.append("Missing name")

    freezone_raw = data.get("freezone")
    if not present(freezone_raw):
        errors.append("Missing freezone configuration")
        freezone_raw = {}
    if not isinstance(freezone_raw, dict) or not present(freezone_raw.get("code")):
        errors.append("Missing freezone code")
        freezone_raw = freezone_raw if isinstance(freezone_raw, dict) else {}

    raw_steps = data.get("steps") or []
    if not isinstance(raw_steps, list):
        errors.append("steps must be a list")
        raw_steps = []
    if not raw_steps:
        errors.extend(["Missing steps", "Missing form steps"])

    steps: List[FormStep] = []
    seen_ids = set()
    for position, raw in enumerate(raw_steps, start=1):
        if not isinstance(raw, dict):
            errors.append(f"Step {position}: must be a mapping")
            continue
        missing = [key for key in ("id", "title", "component") if not present(raw.get(key))]
        errors.extend(f"Step {position}: missing {key}" for key in missing)
        if missing:
            continue
        step_id = str(raw["id"])
        if step_id in seen_ids:
            errors.append(f"Duplicate step id '{step_id}'")
        seen_ids.add(step_id)
        step, step_errors = parse_model(FormStep, {**raw, "id": step_id}, f"Step {position}")
        errors.extend(step_errors)
        if step is not None:
            steps.append(step)

    freezone, fz_errors = parse_model(FreezoneInfo, freezone_raw, "freezone")
    business, br_errors = parse_model(BusinessRules, data.get("business_rules"), "business_rules")
    validation, vr_errors = parse_model(ValidationRules, data.get("validation_rules"), "validation_rules")
    errors.extend(fz_errors + br_errors + vr_errors)
    components = mapping_section(data, "components", errors)
    internal_fields = _string_list(data, "internal_fields", errors)
    application_states = _string_list(data, "application_states", errors)

    if errors:
        logger.error("Rejected form config %r: %d problem(s)", freezone_raw.get("code"), len(errors))
        raise ConfigurationError(errors, kind="form")

    definition = FormConfigDefinition(
        name=data["name"],
        freezone=freezone,
        steps=tuple(steps),
        business_rules=business,
        validation_rules=validation,
        components=components,
        internal_fields=internal_fields,
        application_states=application_states,
        workflow_type=data["workflow_type"],
        description=data.get("description"),
        version=version,
    )
    logger.debug("Loaded form config %s (%d steps)", definition.freezone_code, len(steps))
    return definition


def _string_list(data: Mapping[str, Any], key: str, errors: List[str]) -> Tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, list):
        errors.append(f"{key} must be a list")
        return ()
    return tuple(str(item) for item in value)
