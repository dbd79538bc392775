"""Contract template service - CRUD and default selection"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import ContractTemplate, User
from ...shared.validators import sanitize_text
from .repository import ContractTemplateRepository
from .schemas import (
    TEMPLATE_MAX_LENGTH,
    ContractTemplateCreate,
    ContractTemplateResponse,
    ContractTemplateUpdate,
)

logger = logging.getLogger(__name__)


def serialize_template(template: ContractTemplate) -> ContractTemplateResponse:
    return ContractTemplateResponse(
        id=template.id,
        name=template.name,
        description=template.description,
        content=template.content,
        isDefault=bool(template.is_default),
        createdBy=template.created_by,
        createdAt=template.created_at,
        updatedAt=template.updated_at,
    )


class ContractTemplateService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ContractTemplateRepository()

    def list_templates(self) -> list[ContractTemplate]:
        return self.repo.list_templates(self.db)

    def get_template(self, template_id: int) -> ContractTemplate:
        template = self.repo.get_by_id(self.db, template_id)
        if not template:
            raise HTTPException(status_code=404, detail="Contract template not found")
        return template

    def get_default(self) -> ContractTemplate:
        template = self.repo.get_default(self.db)
        if not template:
            raise HTTPException(status_code=404, detail="No default contract template")
        return template

    def create_template(self, data: ContractTemplateCreate, user: Optional[User]) -> ContractTemplate:
        template = ContractTemplate(
            name=sanitize_text(data.name, max_length=255),
            description=sanitize_text(data.description),
            content=sanitize_text(data.content, max_length=TEMPLATE_MAX_LENGTH),
            is_default=False,
            created_by=user.id if user else None,
        )
        self.db.add(template)
        self.db.flush()
        if data.isDefault:
            self._make_default(template)
        self.db.commit()
        self.db.refresh(template)
        logger.info(f"📄 Created contract template {template.id}: {template.name}")
        return template

    def update_template(self, template_id: int, data: ContractTemplateUpdate) -> ContractTemplate:
        template = self.get_template(template_id)
        if data.name is not None:
            template.name = sanitize_text(data.name, max_length=255)
        if data.description is not None:
            template.description = sanitize_text(data.description)
        if data.content is not None:
            template.content = sanitize_text(data.content, max_length=TEMPLATE_MAX_LENGTH)
        self.db.commit()
        self.db.refresh(template)
        return template

    def delete_template(self, template_id: int) -> None:
        template = self.get_template(template_id)
        if template.is_default:
            raise HTTPException(
                status_code=409,
                detail="The default template cannot be deleted; set another default first",
            )
        detached = self.repo.detach_contracts(self.db, template.id)
        self.db.delete(template)
        self.db.commit()
        logger.info(f"🗑️ Deleted contract template {template_id} ({detached} contract(s) detached)")

    def _make_default(self, template: ContractTemplate) -> None:
        self.repo.clear_default(self.db, keep_id=template.id)
        template.is_default = True

    def set_default(self, template_id: int) -> ContractTemplate:
        template = self.get_template(template_id)
        self._make_default(template)
        self.db.commit()
        self.db.refresh(template)
        logger.info(f"⭐ Contract template {template.id} is now the default")
        return template

    def resolve(self, template_id: Optional[int]) -> Optional[ContractTemplate]:
        """Explicit template when given, else the default one (if any)"""
        if template_id is not None:
            return self.get_template(template_id)
        return self.repo.get_default(self.db)
