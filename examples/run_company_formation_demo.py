"""Example: walk an IFZA application through its form and document steps."""
from formation_engine.core.logging import configure_logging
from formation_engine.handlers.context import StepContext
from formation_engine.handlers.factory import make_handler
from formation_engine.workflow.repository import (
    WorkflowRepository,
    build_form_config_repository,
    build_workflow_repository,
)
from formation_engine.workflow.service import FormConfigService


def main():
    configure_logging()
    service = FormConfigService.for_freezone(build_form_config_repository(), 'IFZA')
    print('Freezone:', service.freezone_info.get('name'))

    # Name and capital checks an API endpoint would run before the forms are submitted
    print('company_name:', service.validate('company_name', {'name': 'Falcon Trading'}).to_dict())
    print('share_capital:', service.validate('share_capital', {'amount': 50000, 'partner_visa_count': 1}).to_dict())

    workflows = build_workflow_repository()
    workflow = workflows.load(WorkflowRepository.formation_workflow_type('IFZA'))
    print(f'Workflow: {workflow.name} ({workflow.total_steps} steps)')

    form_data = {}
    company = make_handler(StepContext(workflow.step_by_number(1), form_data=form_data))
    print('step 1:', company.process({
        'company_name': 'Falcon Trading',
        'share_capital': 50000,
        'license_type': 'commercial',
    })['next_action'])

    people = make_handler(StepContext(workflow.step_by_number(2), form_data=form_data))
    result = people.process({
        'shareholders': [{'full_name': 'Amal Saeed', 'nationality': 'Jordan', 'share_percentage': 100}],
        'directors': [{'full_name': 'Amal Saeed'}],
    })
    print('step 2:', result['next_action'], [s['id'] for s in result['data']['shareholders']])

    documents = make_handler(StepContext(workflow.step_by_number(3)))
    for document_type, file_name, mime in [
        ('passport_copy', 'passport.pdf', 'application/pdf'),
        ('passport_photo', 'photo.jpg', 'image/jpeg'),
    ]:
        upload = documents.process({
            'document_type': document_type,
            'file_name': file_name,
            'file_size_mb': 1,
            'mime_type': mime,
        })
        print(f'upload {document_type}:', upload['message'], 'ocr' if upload['process_ocr'] else '')

    print('\n--- DOCUMENT STEP ---')
    print('status:', documents.completion_status())
    print('completion:', documents.process_completion())
    print('form_data keys:', sorted(form_data))


if __name__ == '__main__':
    main()
