""" State a step handler may read and update. """
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..workflow.models import StepDefinition

@dataclass
class DocumentRecord:
    document_type: str
    file_name: str
    name: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    storage_path: Optional[str] = None
    storage_bucket: str = "documents"
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_image(self) -> bool:
        return (self.mime_type or "").startswith("image/")

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == "application/pdf"

@dataclass
class StepContext:
    """
    One workflow step as seen by its handler.

    ``form_data`` is the owning workflow instance's accumulated form data and
    ``documents`` the records already attached to this step. Hosts that
    persist elsewhere override ``save_document``.
    """
    step: StepDefinition
    form_data: Dict[str, Any] = field(default_factory=dict)
    documents: List[DocumentRecord] = field(default_factory=list)

    def save_document(self, record: DocumentRecord) -> DocumentRecord:
        self.documents.append(record)
        return record

    def documents_of_type(self, document_type: str) -> List[DocumentRecord]:
        return [d for d in self.documents if d.document_type == document_type]
