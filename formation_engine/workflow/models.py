""" Data models for workflow definitions and validation results """

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .schema import DocumentRequirement, PaymentItem


class StepType(str, Enum):
    FORM = "FORM"
    DOC_UPLOAD = "DOC_UPLOAD"
    AUTO = "AUTO"
    REVIEW = "REVIEW"
    PAYMENT = "PAYMENT"
    ISSUANCE = "ISSUANCE"
    NOTIFY = "NOTIFY"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


@dataclass(frozen=True)
class StepDefinition:
    step_number: int
    step_type: StepType
    title: str
    description: Optional[str] = None
    required: bool = False
    fields: Tuple[Any, ...] = ()
    document_requirements: Tuple[DocumentRequirement, ...] = ()
    payment_items: Tuple[PaymentItem, ...] = ()
    automation: Dict[str, Any] = field(default_factory=dict)
    data: Dict[str, Any] = field(default_factory=dict)  # keys the engine does not interpret

    @property
    def validation_rules(self) -> Dict[str, Any]:
        """ The part of the step configuration that submissions are checked against. """
        if self.step_type is StepType.FORM:
            return {"fields": [f.model_dump(exclude_none=True) for f in self.fields]}
        if self.step_type is StepType.DOC_UPLOAD:
            return {"document_requirements": [r.model_dump(exclude_none=True) for r in self.document_requirements]}
        if self.step_type is StepType.PAYMENT:
            return {"payment_items": [p.model_dump(exclude_none=True) for p in self.payment_items]}
        return {}

    @property
    def is_automated(self) -> bool:
        return self.step_type is StepType.AUTO

    def requirement_for(self, document_type: Optional[str]) -> Optional[DocumentRequirement]:
        return next((r for r in self.document_requirements if r.type == document_type), None)


@dataclass(frozen=True)
class WorkflowDefinition:
    workflow_type: str
    name: str
    steps: Tuple[StepDefinition, ...] = ()
    description: Optional[str] = None
    version: Optional[Any] = None
    free_zone: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    validation: Dict[str, Any] = field(default_factory=dict)
    automation: Dict[str, Any] = field(default_factory=dict)
    notifications: Dict[str, Any] = field(default_factory=dict)

    def step_by_number(self, step_number: int) -> Optional[StepDefinition]:
        return next((s for s in self.steps if s.step_number == step_number), None)

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def step_types(self) -> List[StepType]:
        seen: List[StepType] = []
        for step in self.steps:
            if step.step_type not in seen:
                seen.append(step.step_type)
        return seen

    @property
    def required_step_numbers(self) -> List[int]:
        return [s.step_number for s in self.steps if s.required]

    @property
    def automation_enabled(self) -> bool:
        return self.automation.get("enabled") is True

    @property
    def fallback_to_manual(self) -> bool:
        return self.automation.get("fallback_to_manual") is True

    @property
    def estimated_duration_days(self) -> Optional[int]:
        return self.metadata.get("estimated_duration_days")

    @property
    def required_documents(self) -> List[Any]:
        return list(self.metadata.get("required_documents") or [])

    @property
    def fees(self) -> Dict[str, Any]:
        return dict(self.metadata.get("fees") or {})

    def validate_step_data(self, step_number: int, data: Dict[str, Any]) -> "ValidationResult":
        step = self.step_by_number(step_number)
        if step is None:
            return ValidationResult(valid=False, errors=["Step not found"], data=data)

        # imported lazily, the validator module depends on this one
        from .validator import validate_step
        return validate_step(step, data)


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)
    data: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_errors(cls, errors: List[str], data: Any = None, **extra: Any) -> "ValidationResult":
        return cls(valid=not errors, errors=list(errors), data=data, extra=extra)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"valid": self.valid, "errors": list(self.errors)}
        if self.data is not None:
            out["data"] = self.data
        out.update(self.extra)
        return out
