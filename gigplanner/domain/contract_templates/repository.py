"""Contract template repository"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Contract, ContractTemplate


class ContractTemplateRepository:
    @staticmethod
    def list_templates(db: Session) -> list[ContractTemplate]:
        return (
            db.query(ContractTemplate)
            .order_by(ContractTemplate.is_default.desc(), ContractTemplate.name, ContractTemplate.id)
            .all()
        )

    @staticmethod
    def get_by_id(db: Session, template_id: int) -> Optional[ContractTemplate]:
        return db.get(ContractTemplate, template_id)

    @staticmethod
    def get_default(db: Session) -> Optional[ContractTemplate]:
        return db.query(ContractTemplate).filter(ContractTemplate.is_default.is_(True)).first()

    @staticmethod
    def clear_default(db: Session, keep_id: Optional[int] = None) -> None:
        """Unset the default flag everywhere except keep_id (caller commits)"""
        query = db.query(ContractTemplate).filter(ContractTemplate.is_default.is_(True))
        if keep_id is not None:
            query = query.filter(ContractTemplate.id != keep_id)
        query.update({ContractTemplate.is_default: False}, synchronize_session=False)

    @staticmethod
    def detach_contracts(db: Session, template_id: int) -> int:
        """Contracts keep their frozen terms; only the link to the template goes"""
        return (
            db.query(Contract)
            .filter(Contract.template_id == template_id)
            .update({Contract.template_id: None}, synchronize_session=False)
        )
