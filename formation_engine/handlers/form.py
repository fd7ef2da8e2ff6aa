import logging
import uuid
from typing import Any, Dict, List

from ..options.registry import get_options, has_options
from ..workflow.schema import ArrayField, SelectField
from ..workflow.validator import validate_step
from .base import BaseStepHandler

logger = logging.getLogger(__name__)

# array fields whose entries become people records on the application
_PEOPLE_FIELDS = {"shareholders": "shareholder", "directors": "director"}


class FormHandler(BaseStepHandler):
    """ Handler for FORM steps: renders fields and merges validated submissions. """

    @property
    def form_key(self) -> str:
        return f"step_{self.step.step_number}"

    def render(self) -> Dict[str, Any]:
        return {
            **self.header(),
            "fields": process_fields(self.step.fields),
            "validation_rules": self.step.validation_rules,
        }

    render_form = render

    def process(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        result = validate_step(self.step, payload)
        if not result.valid:
            return {"success": False, "errors": result.errors}

        processed = self._process_form_data(result.data)
        self.context.form_data[self.form_key] = processed
        logger.info("Step %s form data stored (%d keys)", self.step.step_number, len(processed))

        return {
            "success": True,
            "data": processed,
            "next_action": self.next_action(),
        }

    process_submission = process

    def completion_status(self) -> Dict[str, Any]:
        return {"complete": self.form_key in self.context.form_data}

    def next_action(self) -> str:
        if self.step.step_number == 2:
            return "proceed_to_documents"
        return "proceed_to_next_step"

    def _process_form_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        processed = dict(data)
        for field in self.step.fields:
            if not isinstance(field, ArrayField) or not data.get(field.name):
                continue
            person_type = _PEOPLE_FIELDS.get(field.name)
            if person_type:
                processed[field.name] = number_entries(data[field.name], person_type)
        return processed


def number_entries(entries: List[Dict[str, Any]], entry_type: str) -> List[Dict[str, Any]]:
    """ Give each entry an id, its type and a 1-based order. """
    numbered = []
    for index, entry in enumerate(entries, start=1):
        numbered.append({**entry, "id": str(uuid.uuid4()), "type": entry_type, "order": index})
    return numbered


def process_fields(fields) -> List[Dict[str, Any]]:
    """ Field definitions as the client renders them, with provider options expanded. """
    rendered = []
    for field in fields:
        out = field.model_dump(exclude_none=True)
        if isinstance(field, SelectField) and isinstance(field.options, str) and has_options(field.options):
            out["options"] = get_options(field.options)
        if isinstance(field, ArrayField):
            out["item_schema"] = process_fields(field.item_schema or [])
        rendered.append(out)
    return rendered
