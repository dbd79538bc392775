import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_public_id():
    """Generate a unique public ID for secure public access"""
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    role = Column(String(50), default="admin", nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class Venue(Base):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=True)
    address = Column(String(500), nullable=True)
    pax_count = Column(Integer, nullable=True)
    capacity = Column(Integer, nullable=True)
    opening_hours = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)

    slots = relationship("PlannerSlot", back_populates="venue")


class Category(Base):
    """Musician category (vocalist, guitarist, drummer...)"""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)


class EventCategory(Base):
    """Kind of engagement a pay rate is negotiated for (e.g. Club Performance)"""

    __tablename__ = "event_categories"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)


class Musician(Base):
    __tablename__ = "musicians"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    pay_rate = Column(Float, nullable=True)  # Default hourly rate
    instruments = Column(JSON, default=list)
    bio = Column(Text, nullable=True)

    category = relationship("Category")
    pay_rates = relationship(
        "MusicianPayRate", back_populates="musician", cascade="all, delete-orphan"
    )


class MusicianPayRate(Base):
    __tablename__ = "musician_pay_rates"
    __table_args__ = (
        UniqueConstraint("musician_id", "event_category_id", name="uq_pay_rate_musician_category"),
    )

    id = Column(Integer, primary_key=True, index=True)
    musician_id = Column(Integer, ForeignKey("musicians.id"), nullable=False, index=True)
    event_category_id = Column(Integer, ForeignKey("event_categories.id"), nullable=False)
    hourly_rate = Column(Float, nullable=True)
    day_rate = Column(Float, nullable=True)
    event_rate = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)

    musician = relationship("Musician", back_populates="pay_rates")


class MonthlyPlanner(Base):
    __tablename__ = "monthly_planners"
    __table_args__ = (UniqueConstraint("month", "year", name="uq_planner_month_year"),)

    id = Column(Integer, primary_key=True, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="draft", nullable=False)  # draft, finalized
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())

    slots = relationship("PlannerSlot", back_populates="planner", cascade="all, delete-orphan")


class PlannerSlot(Base):
    """A (date, venue) booking placeholder inside a planner"""

    __tablename__ = "planner_slots"
    __table_args__ = (
        UniqueConstraint("planner_id", "date", "venue_id", name="uq_slot_planner_date_venue"),
    )

    id = Column(Integer, primary_key=True, index=True)
    planner_id = Column(Integer, ForeignKey("monthly_planners.id"), nullable=False, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False)
    event_category_id = Column(Integer, ForeignKey("event_categories.id"), nullable=True)
    date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=True)  # HH:MM
    end_time = Column(String(5), nullable=True)  # HH:MM
    duration = Column(Float, nullable=True)  # Hours, takes precedence over start/end
    status = Column(String(20), default="open", nullable=False)  # open, assigned, completed
    description = Column(Text, nullable=True)

    planner = relationship("MonthlyPlanner", back_populates="slots")
    venue = relationship("Venue", back_populates="slots")
    assignments = relationship(
        "PlannerAssignment", back_populates="slot", cascade="all, delete-orphan"
    )


class PlannerAssignment(Base):
    __tablename__ = "planner_assignments"
    __table_args__ = (
        UniqueConstraint("slot_id", "musician_id", name="uq_assignment_slot_musician"),
    )

    id = Column(Integer, primary_key=True, index=True)
    slot_id = Column(Integer, ForeignKey("planner_slots.id"), nullable=False, index=True)
    musician_id = Column(Integer, ForeignKey("musicians.id"), nullable=False, index=True)
    # Status workflow: scheduled → contract-sent → contract-signed/contract-rejected
    # Attendance after the gig: attended, absent
    status = Column(String(30), default="scheduled", nullable=False)
    actual_fee = Column(Float, nullable=True)
    # True when actual_fee was entered by hand; such fees survive slot edits
    fee_overridden = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, nullable=True)
    assigned_at = Column(DateTime, server_default=func.now())
    attendance_marked_at = Column(DateTime, nullable=True)
    attendance_marked_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    slot = relationship("PlannerSlot", back_populates="assignments")
    musician = relationship("Musician")


class Contract(Base):
    """Agreement covering one musician's assignments in one planner"""

    __tablename__ = "contracts"

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(String(36), unique=True, index=True, default=generate_public_id)
    planner_id = Column(Integer, ForeignKey("monthly_planners.id"), nullable=False, index=True)
    musician_id = Column(Integer, ForeignKey("musicians.id"), nullable=False, index=True)
    template_id = Column(Integer, ForeignKey("contract_templates.id"), nullable=True)
    # Status workflow: draft → sent → signed/partially-signed/rejected → completed;
    # cancelled is manual
    status = Column(String(20), default="draft", nullable=False)
    amount = Column(Float, default=0, nullable=False)
    terms = Column(Text, nullable=True)
    # Single-use signing token; cleared once the musician responds
    token = Column(String(128), unique=True, nullable=True, index=True)
    token_expires_at = Column(DateTime, nullable=True)
    musician_signature = Column(Text, nullable=True)  # Typed name/initials, HTML-escaped
    company_signature = Column(String(255), nullable=True)
    response_notes = Column(Text, nullable=True)
    sent_at = Column(DateTime, nullable=True)
    responded_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    planner = relationship("MonthlyPlanner")
    musician = relationship("Musician")
    lines = relationship(
        "ContractLine",
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="ContractLine.date",
    )


class ContractTemplate(Base):
    """Reusable terms and conditions; the default one is used when generating contracts"""

    __tablename__ = "contract_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    content = Column(Text, nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())


class ContractLine(Base):
    """One performance date covered by a contract, frozen at generation time"""

    __tablename__ = "contract_lines"

    id = Column(Integer, primary_key=True, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False, index=True)
    assignment_id = Column(Integer, ForeignKey("planner_assignments.id"), nullable=True)
    date = Column(Date, nullable=False)
    venue_name = Column(String(255), nullable=True)
    start_time = Column(String(5), nullable=True)
    end_time = Column(String(5), nullable=True)
    fee = Column(Float, default=0, nullable=False)
    # Musician's answer for this date: pending, accepted, rejected
    status = Column(String(20), default="pending", nullable=False)
    response_notes = Column(Text, nullable=True)
    responded_at = Column(DateTime, nullable=True)

    contract = relationship("Contract", back_populates="lines")


class Availability(Base):
    __tablename__ = "availability"
    __table_args__ = (UniqueConstraint("musician_id", "date", name="uq_availability_musician_date"),)

    id = Column(Integer, primary_key=True, index=True)
    musician_id = Column(Integer, ForeignKey("musicians.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    is_available = Column(Boolean, default=False, nullable=False)
    month = Column(String(7), nullable=False)  # YYYY-MM
    year = Column(Integer, nullable=False)


class AvailabilityShareLink(Base):
    __tablename__ = "availability_share_links"

    id = Column(Integer, primary_key=True, index=True)
    musician_id = Column(Integer, ForeignKey("musicians.id"), nullable=False, index=True)
    token = Column(String(128), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    last_accessed_at = Column(DateTime, nullable=True)


class MonthlyInvoice(Base):
    __tablename__ = "monthly_invoices"
    __table_args__ = (
        UniqueConstraint("planner_id", "musician_id", name="uq_invoice_planner_musician"),
    )

    id = Column(Integer, primary_key=True, index=True)
    planner_id = Column(Integer, ForeignKey("monthly_planners.id"), nullable=False, index=True)
    musician_id = Column(Integer, ForeignKey("musicians.id"), nullable=False, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    total_slots = Column(Integer, default=0, nullable=False)
    attended_slots = Column(Integer, default=0, nullable=False)
    total_amount = Column(Float, default=0, nullable=False)
    status = Column(String(20), default="draft", nullable=False)  # draft, finalized, paid
    generated_at = Column(DateTime, server_default=func.now())
    paid_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    musician = relationship("Musician")


class StatusHistory(Base):
    """Audit trail of status changes for planners, assignments, contracts and invoices"""

    __tablename__ = "status_history"
    __table_args__ = (Index("ix_status_history_entity", "entity_type", "entity_id"),)

    id = Column(Integer, primary_key=True, index=True)
    entity_type = Column(String(30), nullable=False)  # planner, assignment, contract, invoice
    entity_id = Column(Integer, nullable=False)
    from_status = Column(String(30), nullable=True)
    to_status = Column(String(30), nullable=False)
    notes = Column(String(5000), nullable=True)
    changed_by = Column(String(255), nullable=True)  # admin:<username>, musician:<id>, system
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
