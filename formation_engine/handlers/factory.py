""" Pick the handler for a step based on its type. """
from ..workflow.models import StepType
from .base import BaseStepHandler
from .context import StepContext
from .document_upload import DocumentUploadHandler
from .form import FormHandler


def make_handler(context: StepContext) -> BaseStepHandler:
    match context.step.step_type:
        case StepType.FORM:
            return FormHandler(context)
        case StepType.DOC_UPLOAD:
            return DocumentUploadHandler(context)
        case StepType.AUTO | StepType.REVIEW | StepType.PAYMENT | StepType.ISSUANCE | StepType.NOTIFY:
            raise ValueError(f"No handler for step type: {context.step.step_type.value}")
