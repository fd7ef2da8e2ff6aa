""" Validate a submitted payload against a step's declared schema. """

import math
import re
from typing import Any, Dict, List, Mapping, Optional

from .models import StepDefinition, StepType, ValidationResult
from .schema import ArrayField, NumberField, SelectField, TextareaField, TextField


def is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


class StepValidator:
    """ Checks one step's submission and reports every violation found. """

    def __init__(self, step: StepDefinition):
        self.step = step

    def validate(self, data: Optional[Mapping[str, Any]]) -> ValidationResult:
        data = data if data is not None else {}
        match self.step.step_type:
            case StepType.FORM:
                errors = self._validate_form(data)
            case StepType.DOC_UPLOAD:
                errors = self._validate_documents(data)
            case StepType.PAYMENT:
                errors = self._validate_payment(data)
            case StepType.AUTO | StepType.REVIEW | StepType.ISSUANCE | StepType.NOTIFY:
                errors = []
        return ValidationResult.from_errors(errors, data=data)

    def _validate_form(self, data: Mapping[str, Any]) -> List[str]:
        errors: List[str] = []
        for field in self.step.fields:
            value = data.get(field.name)
            if is_blank(value):
                if field.required:
                    errors.append(f"{field.display_label} is required")
                continue
            errors.extend(validate_field(field, value))
        return errors

    def _validate_documents(self, data: Mapping[str, Any]) -> List[str]:
        errors: List[str] = []
        requirements = self.step.document_requirements
        uploaded = data.get("documents") or []
        if not isinstance(uploaded, (list, tuple)):
            errors.append("documents must be an array")
            uploaded = []

        malformed = [i for i, doc in enumerate(uploaded, start=1) if not isinstance(doc, Mapping)]
        errors.extend(f"Document {i} must be an object" for i in malformed)
        uploaded = [doc for doc in uploaded if isinstance(doc, Mapping)]

        for req in requirements:
            if req.required and not any(doc.get("type") == req.type for doc in uploaded):
                errors.append(f"{req.display_title} is required")

        for doc in uploaded:
            req = self.step.requirement_for(doc.get("type"))
            if req is None:
                continue
            size = _size_mb(doc.get("size_mb"))
            if size is False:
                errors.append(f"{req.display_title}: file size must be a number")
            elif req.max_size_mb is not None and size is not None and size > req.max_size_mb:
                errors.append(f"{req.display_title}: file size exceeds {req.max_size_mb}MB limit")
            fmt = doc.get("format")
            if req.accepted_formats is not None and (fmt is None or str(fmt).upper() not in req.accepted_formats):
                errors.append(
                    f"{req.display_title}: unsupported file format. Accepted: {', '.join(req.accepted_formats)}"
                )
        return errors

    def _validate_payment(self, data: Mapping[str, Any]) -> List[str]:
        errors: List[str] = []
        for item in self.step.payment_items:
            if not item.required:
                continue
            if not (data.get(item.payment_key) or data.get("total_amount")):
                errors.append(f"Payment for {item.name} is required")
        return errors


def _size_mb(value: Any):
    """ Declared upload size in MB, None when absent, False when unreadable. """
    if value is None:
        return None
    if isinstance(value, bool):
        return False
    try:
        size = float(value)
    except (TypeError, ValueError):
        return False
    return size if math.isfinite(size) else False


def validate_field(field, value: Any) -> List[str]:
    """ Type-specific checks for a present (non-blank) value. """
    if isinstance(field, (TextField, TextareaField)):
        return _validate_text(field, value)
    if isinstance(field, NumberField):
        return _validate_number(field, value)
    if isinstance(field, SelectField):
        return _validate_select(field, value)
    if isinstance(field, ArrayField):
        return _validate_array(field, value)
    return []


def _validate_text(field, value: Any) -> List[str]:
    errors: List[str] = []
    rules = field.validation
    label = field.display_label
    text = str(value)

    if rules.min_length is not None and len(text) < rules.min_length:
        errors.append(f"{label} must be at least {rules.min_length} characters")
    if rules.max_length is not None and len(text) > rules.max_length:
        errors.append(f"{label} must not exceed {rules.max_length} characters")
    if rules.pattern and not re.fullmatch(rules.pattern, text):
        errors.append(f"{label} format is invalid")
    return errors


def _validate_number(field: NumberField, value: Any) -> List[str]:
    label = field.display_label
    if isinstance(value, bool):
        return [f"{label} must be a valid number"]
    try:
        number = float(value)
    except (TypeError, ValueError):
        return [f"{label} must be a valid number"]
    if not math.isfinite(number):
        return [f"{label} must be a valid number"]

    errors: List[str] = []
    rules = field.validation
    if rules.min is not None and number < rules.min:
        errors.append(f"{label} must be at least {rules.min}")
    if rules.max is not None and number > rules.max:
        errors.append(f"{label} must not exceed {rules.max}")
    return errors


def _validate_select(field: SelectField, value: Any) -> List[str]:
    # options naming a provider ("countries") are resolved at render time only
    if isinstance(field.options, list) and value not in field.options:
        return [f"{field.display_label} must be one of: {', '.join(str(o) for o in field.options)}"]
    return []


def _validate_array(field: ArrayField, value: Any) -> List[str]:
    label = field.display_label
    if not isinstance(value, (list, tuple)):
        return [f"{label} must be an array"]

    errors: List[str] = []
    if field.min_items is not None and len(value) < field.min_items:
        errors.append(f"{label} must have at least {field.min_items} items")
    if field.max_items is not None and len(value) > field.max_items:
        errors.append(f"{label} must not exceed {field.max_items} items")

    # one level deep: nested arrays inside items are not walked
    for index, item in enumerate(value, start=1):
        if not isinstance(item, Mapping):
            errors.append(f"{label} item {index} must be an object")
            continue
        for item_field in field.item_schema or []:
            if item_field.required and is_blank(item.get(item_field.name)):
                errors.append(f"{label} item {index}: {item_field.name} is required")
    return errors


def validate_step(step: StepDefinition, data: Optional[Dict[str, Any]]) -> ValidationResult:
    return StepValidator(step).validate(data)
