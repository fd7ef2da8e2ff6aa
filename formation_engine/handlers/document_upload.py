import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from ..core.config import settings
from .base import BaseStepHandler
from .context import DocumentRecord

logger = logging.getLogger(__name__)


class DocumentUploadHandler(BaseStepHandler):
    """ Handler for DOC_UPLOAD steps: accepts uploads and tracks what is still missing. """

    def render(self) -> Dict[str, Any]:
        return {
            **self.header(),
            "document_requirements": self._annotated_requirements(),
            "uploaded_documents": list(self.context.documents),
            "upload_url": self.upload_target(),
        }

    render_upload_interface = render

    def process(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        errors = self.validate_document(payload)
        if errors:
            return {"success": False, "errors": errors}

        record = self.context.save_document(self._build_record(payload))
        process_ocr = record.is_image or record.is_pdf
        logger.info(
            "Stored %s for step %s (ocr=%s)", record.document_type, self.step.step_number, process_ocr
        )
        return {
            "success": True,
            "document": record,
            "message": "Document uploaded successfully",
            "process_ocr": process_ocr,
        }

    process_upload = process

    def validate_document(self, payload: Dict[str, Any]) -> List[str]:
        document_type = payload.get("document_type")
        requirement = self.step.requirement_for(document_type)
        if requirement is None:
            return ["Document type not recognized for this step"]

        errors = []
        size = payload.get("file_size_mb")
        if requirement.max_size_mb is not None and size is not None and size > requirement.max_size_mb:
            errors.append(f"File size exceeds maximum of {requirement.max_size_mb}MB")

        if requirement.accepted_formats is not None:
            file_name = payload.get("file_name") or ""
            extension = file_name.rsplit(".", 1)[-1].upper() if "." in file_name else ""
            if extension not in requirement.accepted_formats:
                errors.append(f"File format not accepted. Allowed: {', '.join(requirement.accepted_formats)}")

        if not requirement.multiple and self.context.documents_of_type(document_type):
            errors.append("Only one file allowed for this document type")

        return errors

    def completion_status(self) -> Dict[str, Any]:
        required_types = [r.type for r in self.step.document_requirements if r.required]
        uploaded_types = {d.document_type for d in self.context.documents}
        missing = [t for t in required_types if t not in uploaded_types]
        return {
            "complete": not missing,
            "missing_documents": missing,
            "uploaded_count": len(self.context.documents),
            "required_count": len(required_types),
        }

    check_completion_status = completion_status

    def process_completion(self) -> Dict[str, Any]:
        status = self.completion_status()
        if not status["complete"]:
            return {
                "success": False,
                "errors": [f"Missing required documents: {', '.join(status['missing_documents'])}"],
            }
        return {
            "success": True,
            "data": {
                "documents_uploaded": status["uploaded_count"],
                "completion_timestamp": datetime.now(timezone.utc).isoformat(),
            },
        }

    def upload_target(self) -> Dict[str, Any]:
        expires = datetime.now(timezone.utc) + timedelta(minutes=settings.UPLOAD_URL_TTL_MIN)
        return {
            "upload_url": f"{settings.STORAGE_URL}/storage/v1/upload",
            "bucket": settings.UPLOAD_BUCKET,
            "expires_at": expires.isoformat(),
        }

    def _annotated_requirements(self) -> List[Dict[str, Any]]:
        annotated = []
        for req in self.step.document_requirements:
            count = len(self.context.documents_of_type(req.type))
            annotated.append({**req.model_dump(exclude_none=True), "uploaded": count > 0, "upload_count": count})
        return annotated

    def _build_record(self, payload: Dict[str, Any]) -> DocumentRecord:
        return DocumentRecord(
            document_type=payload["document_type"],
            file_name=payload.get("file_name") or "",
            name=payload.get("name"),
            file_size=payload.get("file_size"),
            mime_type=payload.get("mime_type"),
            storage_path=payload.get("storage_path"),
            storage_bucket=payload.get("storage_bucket") or settings.UPLOAD_BUCKET,
            metadata={
                "uploaded_by": payload.get("uploaded_by"),
                "original_filename": payload.get("original_filename"),
                "upload_session": payload.get("upload_session"),
            },
        )
