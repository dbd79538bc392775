"""Reference data repository - lookups shared by the reference CRUD endpoints"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import (
    Category,
    EventCategory,
    Musician,
    MusicianPayRate,
    PlannerAssignment,
    PlannerSlot,
)


class ReferenceRepository:
    """Repository for venues, categories, musicians and pay rates"""

    @staticmethod
    def list_all(db: Session, model, order_by=None) -> list:
        query = db.query(model)
        return query.order_by(order_by if order_by is not None else model.id).all()

    @staticmethod
    def get_by_id(db: Session, model, record_id: int):
        return db.get(model, record_id)

    @staticmethod
    def create(db: Session, record):
        db.add(record)
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def update(db: Session, record, **updates):
        """Apply non-None updates to a record"""
        for key, value in updates.items():
            if value is not None and hasattr(record, key):
                setattr(record, key, value)
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def delete(db: Session, record) -> None:
        db.delete(record)
        db.commit()

    @staticmethod
    def venue_in_use(db: Session, venue_id: int) -> bool:
        return db.query(PlannerSlot.id).filter(PlannerSlot.venue_id == venue_id).first() is not None

    @staticmethod
    def category_in_use(db: Session, category_id: int) -> bool:
        return db.query(Musician.id).filter(Musician.category_id == category_id).first() is not None

    @staticmethod
    def event_category_in_use(db: Session, event_category_id: int) -> bool:
        in_rates = (
            db.query(MusicianPayRate.id)
            .filter(MusicianPayRate.event_category_id == event_category_id)
            .first()
        )
        in_slots = (
            db.query(PlannerSlot.id)
            .filter(PlannerSlot.event_category_id == event_category_id)
            .first()
        )
        return in_rates is not None or in_slots is not None

    @staticmethod
    def musician_has_assignments(db: Session, musician_id: int) -> bool:
        return (
            db.query(PlannerAssignment.id)
            .filter(PlannerAssignment.musician_id == musician_id)
            .first()
            is not None
        )

    @staticmethod
    def get_pay_rates(db: Session, musician_id: Optional[int] = None) -> list[MusicianPayRate]:
        query = db.query(MusicianPayRate)
        if musician_id:
            query = query.filter(MusicianPayRate.musician_id == musician_id)
        return query.order_by(MusicianPayRate.musician_id, MusicianPayRate.event_category_id).all()

    @staticmethod
    def get_pay_rate_for(
        db: Session, musician_id: int, event_category_id: int
    ) -> Optional[MusicianPayRate]:
        return (
            db.query(MusicianPayRate)
            .filter(
                MusicianPayRate.musician_id == musician_id,
                MusicianPayRate.event_category_id == event_category_id,
            )
            .first()
        )

    @staticmethod
    def category_exists(db: Session, category_id: int) -> bool:
        return db.get(Category, category_id) is not None

    @staticmethod
    def event_category_exists(db: Session, event_category_id: int) -> bool:
        return db.get(EventCategory, event_category_id) is not None
