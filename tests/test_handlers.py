"""Tests for step handler implementations."""

from pathlib import Path

import pytest
from formation_engine.handlers.base import BaseStepHandler
from formation_engine.handlers.context import DocumentRecord, StepContext
from formation_engine.handlers.document_upload import DocumentUploadHandler
from formation_engine.handlers.factory import make_handler
from formation_engine.handlers.form import FormHandler
from formation_engine.options.registry import get_options, register_options
from formation_engine.workflow.compiler import load_workflow


CONFIG_DIR = Path(__file__).resolve().parent.parent / "config" / "workflows"


@pytest.fixture(scope="module")
def workflow():
    return load_workflow((CONFIG_DIR / "ifza_company_formation.yml").read_text())


def upload(document_type="passport_copy", file_name="passport.pdf", size=1, mime="application/pdf"):
    return {
        "document_type": document_type,
        "file_name": file_name,
        "file_size_mb": size,
        "mime_type": mime,
        "name": "Passport",
        "storage_path": f"uploads/{file_name}",
        "uploaded_by": "user-1",
    }


def test_base_handler_is_abstract(workflow):
    """Test that BaseStepHandler cannot be instantiated directly."""
    with pytest.raises(TypeError):
        BaseStepHandler(StepContext(workflow.step_by_number(1)))


def test_make_handler_dispatch(workflow):
    """Test handlers are chosen by step type."""
    assert isinstance(make_handler(StepContext(workflow.step_by_number(1))), FormHandler)
    assert isinstance(make_handler(StepContext(workflow.step_by_number(3))), DocumentUploadHandler)

    with pytest.raises(ValueError, match="No handler for step type: REVIEW"):
        make_handler(StepContext(workflow.step_by_number(6)))


def test_form_render_expands_option_providers(workflow):
    """Test provider-backed select options are expanded for the client."""
    handler = FormHandler(StepContext(workflow.step_by_number(2)))

    rendered = handler.render_form()

    assert rendered["step_number"] == 2
    assert rendered["title"] == "Shareholders & Directors"
    nationality = rendered["fields"][0]["item_schema"][1]
    assert nationality["name"] == "nationality"
    assert nationality["options"] == get_options("countries")
    assert "United Arab Emirates" in nationality["options"]
    assert rendered["validation_rules"]["fields"][0]["name"] == "shareholders"


def test_form_render_keeps_literal_options(workflow):
    """Test literal option lists are passed through."""
    rendered = FormHandler(StepContext(workflow.step_by_number(1))).render()

    license_type = next(f for f in rendered["fields"] if f["name"] == "license_type")
    assert license_type["options"] == ["commercial", "professional", "industrial"]


def test_registered_option_provider():
    """Test custom option providers can be registered."""
    @register_options("test.license_types")
    def license_types():
        return ["commercial"]

    assert get_options("test.license_types") == ["commercial"]
    with pytest.raises(ValueError, match="Option provider not found"):
        get_options("test.unknown")


def test_form_submission_numbers_people(workflow):
    """Test shareholders and directors receive ids, types and order."""
    context = StepContext(workflow.step_by_number(2), form_data={"step_1": {"company_name": "Falcon"}})
    handler = FormHandler(context)
    payload = {
        "shareholders": [
            {"full_name": "Amal Saeed", "nationality": "Jordan", "share_percentage": 60},
            {"full_name": "Omar Haddad", "nationality": "Egypt", "share_percentage": 40},
        ],
        "directors": [{"full_name": "Amal Saeed"}],
    }

    result = handler.process_submission(payload)

    assert result["success"] is True
    assert result["next_action"] == "proceed_to_documents"
    shareholders = result["data"]["shareholders"]
    assert [s["order"] for s in shareholders] == [1, 2]
    assert {s["type"] for s in shareholders} == {"shareholder"}
    assert len({s["id"] for s in shareholders}) == 2
    assert result["data"]["directors"][0]["type"] == "director"
    assert context.form_data["step_2"] == result["data"]
    assert context.form_data["step_1"] == {"company_name": "Falcon"}
    assert "id" not in payload["shareholders"][0]
    assert handler.completion_status() == {"complete": True}


def test_form_submission_failure_leaves_state(workflow):
    """Test invalid submissions return errors and store nothing."""
    context = StepContext(workflow.step_by_number(1))
    handler = FormHandler(context)

    result = handler.process({"company_name": "Falcon"})

    assert result == {
        "success": False,
        "errors": ["Share Capital is required", "License Type is required"],
    }
    assert context.form_data == {}
    assert handler.completion_status() == {"complete": False}


def test_form_next_action_default(workflow):
    """Test steps other than the second proceed to the next step."""
    handler = FormHandler(StepContext(workflow.step_by_number(1)))

    result = handler.process({"company_name": "Falcon", "share_capital": 50000, "license_type": "commercial"})

    assert result["success"] is True
    assert result["next_action"] == "proceed_to_next_step"


def test_upload_unknown_document_type(workflow):
    """Test an unrecognized document type is the only error reported."""
    handler = DocumentUploadHandler(StepContext(workflow.step_by_number(3)))

    result = handler.process_upload(upload(document_type="trade_license", size=100, file_name="x.exe"))

    assert result == {"success": False, "errors": ["Document type not recognized for this step"]}


def test_upload_size_and_format(workflow):
    """Test file size and extension are checked against the requirement."""
    handler = DocumentUploadHandler(StepContext(workflow.step_by_number(3)))

    result = handler.process(upload(file_name="passport.docx", size=12))

    assert result["success"] is False
    assert result["errors"] == [
        "File size exceeds maximum of 10MB",
        "File format not accepted. Allowed: PDF, JPG, JPEG, PNG",
    ]


def test_upload_success_and_ocr_flag(workflow):
    """Test a valid upload is stored and flagged for OCR when it is a PDF or image."""
    context = StepContext(workflow.step_by_number(3))
    handler = DocumentUploadHandler(context)

    result = handler.process(upload())

    assert result["success"] is True
    assert result["message"] == "Document uploaded successfully"
    assert result["process_ocr"] is True
    assert isinstance(result["document"], DocumentRecord)
    assert result["document"].storage_bucket == "documents"
    assert result["document"].metadata["uploaded_by"] == "user-1"
    assert context.documents == [result["document"]]

    photo = handler.process(upload("passport_photo", "photo.JPG", mime="image/jpeg"))
    assert photo["process_ocr"] is True


def test_upload_without_ocr_mime(workflow):
    """Test mime types other than images and PDFs skip OCR."""
    handler = DocumentUploadHandler(StepContext(workflow.step_by_number(3)))

    result = handler.process(upload(mime="application/octet-stream"))

    assert result["success"] is True
    assert result["process_ocr"] is False


def test_upload_single_file_per_type(workflow):
    """Test a second upload of a single-file document type is rejected."""
    handler = DocumentUploadHandler(StepContext(workflow.step_by_number(3)))
    handler.process(upload())

    again = handler.process(upload())
    assert again == {"success": False, "errors": ["Only one file allowed for this document type"]}

    first_address = handler.process(upload("proof_of_address", "bill.pdf"))
    second_address = handler.process(upload("proof_of_address", "lease.pdf"))
    assert first_address["success"] is True
    assert second_address["success"] is True


def test_completion_status_reports_missing(workflow):
    """Test completion compares required types with uploaded ones."""
    context = StepContext(workflow.step_by_number(3))
    handler = DocumentUploadHandler(context)
    handler.process(upload())

    status = handler.check_completion_status()

    assert status == {
        "complete": False,
        "missing_documents": ["passport_photo"],
        "uploaded_count": 1,
        "required_count": 2,
    }
    assert handler.process_completion() == {
        "success": False,
        "errors": ["Missing required documents: passport_photo"],
    }


def test_process_completion_success(workflow):
    """Test completion data once every required document is present."""
    context = StepContext(workflow.step_by_number(3))
    handler = DocumentUploadHandler(context)
    handler.process(upload())
    handler.process(upload("passport_photo", "photo.png", mime="image/png"))

    result = handler.process_completion()

    assert handler.completion_status()["complete"] is True
    assert result["success"] is True
    assert result["data"]["documents_uploaded"] == 2
    assert "completion_timestamp" in result["data"]


def test_render_upload_interface(workflow):
    """Test requirements are annotated with upload progress."""
    context = StepContext(workflow.step_by_number(3))
    handler = DocumentUploadHandler(context)
    handler.process(upload())

    rendered = handler.render_upload_interface()

    by_type = {r["type"]: r for r in rendered["document_requirements"]}
    assert by_type["passport_copy"]["uploaded"] is True
    assert by_type["passport_copy"]["upload_count"] == 1
    assert by_type["passport_photo"]["uploaded"] is False
    assert len(rendered["uploaded_documents"]) == 1
    assert rendered["upload_url"]["bucket"] == "documents"
    assert rendered["upload_url"]["upload_url"].endswith("/storage/v1/upload")


def test_form_submission_rejects_bare_people_entries():
    """Test bare strings in a people array are rejected rather than numbered."""
    step = load_workflow("""
workflow_type: t
name: T
steps:
  - step_number: 1
    step_type: FORM
    title: People
    fields:
      - { name: shareholders, label: Shareholders, type: array, required: true }
""").step_by_number(1)
    context = StepContext(step)

    result = FormHandler(context).process_submission({"shareholders": ["Alice"]})

    assert result == {"success": False, "errors": ["Shareholders item 1 must be an object"]}
    assert context.form_data == {}
