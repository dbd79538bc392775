"""Contract template router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...schemas import MessageResponse
from .schemas import ContractTemplateCreate, ContractTemplateResponse, ContractTemplateUpdate
from .service import ContractTemplateService, serialize_template

router = APIRouter(prefix="/contract-templates", tags=["Contract Templates"])


def get_template_service(db: Session = Depends(get_db)) -> ContractTemplateService:
    """Dependency injection for ContractTemplateService"""
    return ContractTemplateService(db)


@router.get("", response_model=list[ContractTemplateResponse])
async def list_templates(
    current_user: User = Depends(get_current_user),
    service: ContractTemplateService = Depends(get_template_service),
):
    return [serialize_template(t) for t in service.list_templates()]


@router.get("/default", response_model=ContractTemplateResponse)
async def get_default_template(
    current_user: User = Depends(get_current_user),
    service: ContractTemplateService = Depends(get_template_service),
):
    return serialize_template(service.get_default())


@router.get("/{template_id}", response_model=ContractTemplateResponse)
async def get_template(
    template_id: int,
    current_user: User = Depends(get_current_user),
    service: ContractTemplateService = Depends(get_template_service),
):
    return serialize_template(service.get_template(template_id))


@router.post("", response_model=ContractTemplateResponse, status_code=201)
async def create_template(
    data: ContractTemplateCreate,
    current_user: User = Depends(get_current_user),
    service: ContractTemplateService = Depends(get_template_service),
):
    return serialize_template(service.create_template(data, current_user))


@router.put("/{template_id}", response_model=ContractTemplateResponse)
async def update_template(
    template_id: int,
    data: ContractTemplateUpdate,
    current_user: User = Depends(get_current_user),
    service: ContractTemplateService = Depends(get_template_service),
):
    return serialize_template(service.update_template(template_id, data))


@router.delete("/{template_id}", response_model=MessageResponse)
async def delete_template(
    template_id: int,
    current_user: User = Depends(get_current_user),
    service: ContractTemplateService = Depends(get_template_service),
):
    service.delete_template(template_id)
    return MessageResponse(message="Contract template deleted")


@router.post("/{template_id}/set-default")
async def set_default_template(
    template_id: int,
    current_user: User = Depends(get_current_user),
    service: ContractTemplateService = Depends(get_template_service),
):
    """Make this the template used when contracts are generated without explicit terms"""
    service.set_default(template_id)
    return {"success": True}
