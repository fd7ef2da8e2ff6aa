""" Load and validate WorkflowDefinitions from YAML. """

import logging
from typing import Any, Dict, List, Mapping, Union

import yaml

from .errors import ConfigurationError
from .models import StepDefinition, StepType, WorkflowDefinition
from .schema import DocumentRequirement, PaymentItem, parse_fields, parse_list

logger = logging.getLogger(__name__)

_STEP_KEYS = {
    "step_number", "step_type", "title", "description", "required",
    "fields", "document_requirements", "payment_items", "automation",
}


def read_document(source: Union[str, bytes, Mapping[str, Any]], kind: str = "workflow") -> Dict[str, Any]:
    """Turn YAML text (or an already-parsed mapping) into a plain dict."""
    if isinstance(source, Mapping):
        return dict(source)
    try:
        data = yaml.safe_load(source)
    except yaml.YAMLError as e:
        raise ConfigurationError([f"YAML parse error: {e}"], kind=kind)
    if not isinstance(data, dict):
        raise ConfigurationError(["Document must be a mapping"], kind=kind)
    return data


def mapping_section(data: Mapping[str, Any], key: str, errors: List[str], prefix: str = "") -> Dict[str, Any]:
    """ Copy of an optional mapping section; a non-mapping value is recorded in ``errors``. """
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        errors.append(f"{prefix}{key} must be a mapping")
        return {}
    return dict(value)


def present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, dict, tuple)):
        return len(value) > 0
    return True


def load_workflow(source: Union[str, bytes, Mapping[str, Any]]) -> WorkflowDefinition:
    """
    Load a WorkflowDefinition from YAML text or a parsed document.

    Every structural problem is collected before raising, so a single
    ConfigurationError lists all of them.
    """
    data = read_document(source)

    errors: List[str] = []
    if not present(data.get("workflow_type")):
        errors.append("Missing workflow_type")
    if not present(data.get("name")):
        errors.append("Missing name")

    raw_steps = data.get("steps") or []
    if not isinstance(raw_steps, list):
        errors.append("steps must be a list")
        raw_steps = []
    if not raw_steps:
        errors.append("Missing steps")

    numbers = sorted(
        s["step_number"] for s in raw_steps
        if isinstance(s, dict) and isinstance(s.get("step_number"), int) and not isinstance(s.get("step_number"), bool)
    )
    if raw_steps and numbers != list(range(1, len(numbers) + 1)):
        errors.append("Step numbers must be sequential")

    sections = {
        key: mapping_section(data, key, errors)
        for key in ("metadata", "validation", "automation", "notifications")
    }

    steps: List[StepDefinition] = []
    for position, raw in enumerate(raw_steps, start=1):
        step, step_errors = _compile_step(raw, position)
        errors.extend(step_errors)
        if step is not None:
            steps.append(step)

    if errors:
        logger.error("Rejected workflow %r: %d problem(s)", data.get("workflow_type"), len(errors))
        raise ConfigurationError(errors, kind="workflow")

    steps.sort(key=lambda s: s.step_number)
    workflow = WorkflowDefinition(
        workflow_type=data["workflow_type"],
        name=data["name"],
        steps=tuple(steps),
        description=data.get("description"),
        version=data.get("version"),
        free_zone=data.get("free_zone"),
        **sections,
    )
    logger.debug("Loaded workflow %s with %d steps", workflow.workflow_type, workflow.total_steps)
    return workflow


def _compile_step(raw: Any, position: int):
    prefix = f"Step {position}"
    if not isinstance(raw, dict):
        return None, [f"{prefix}: must be a mapping"]

    errors: List[str] = []
    number = raw.get("step_number")
    if not present(number):
        errors.append(f"{prefix}: missing step_number")
    elif not isinstance(number, int) or isinstance(number, bool):
        errors.append(f"{prefix}: step_number must be an integer")

    raw_type = raw.get("step_type")
    step_type = None
    if not present(raw_type):
        errors.append(f"{prefix}: missing step_type")
    elif raw_type not in StepType.values():
        errors.append(f"{prefix}: invalid step_type '{raw_type}'")
    else:
        step_type = StepType(raw_type)

    if not present(raw.get("title")):
        errors.append(f"{prefix}: missing title")

    fields, field_errors = parse_fields(raw.get("fields"), f"{prefix}: fields")
    requirements, req_errors = parse_list(
        DocumentRequirement, raw.get("document_requirements"), f"{prefix}: document_requirements"
    )
    payment_items, payment_errors = parse_list(PaymentItem, raw.get("payment_items"), f"{prefix}: payment_items")
    errors.extend(field_errors + req_errors + payment_errors)
    automation = mapping_section(raw, "automation", errors, f"{prefix}: ")

    if errors:
        return None, errors

    step = StepDefinition(
        step_number=number,
        step_type=step_type,
        title=raw["title"],
        description=raw.get("description"),
        required=bool(raw.get("required", False)),
        fields=fields,
        document_requirements=requirements,
        payment_items=payment_items,
        automation=automation,
        data={k: v for k, v in raw.items() if k not in _STEP_KEYS},
    )
    return step, []
