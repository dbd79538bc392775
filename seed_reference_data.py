#!/usr/bin/env python3
"""
Seed reference data: musician categories, event categories, venues,
sample musicians and their pay rates

Safe to run more than once; existing rows (matched by name/title) are kept.

Run with: python seed_reference_data.py
"""

import logging

from gigplanner.database import Base, SessionLocal, engine
from gigplanner.models import Category, EventCategory, Musician, MusicianPayRate, Venue

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

# Ids line up with the category default rates used by the fee calculator
MUSICIAN_CATEGORIES = [
    (1, "Vocalist", "Lead and backing vocals"),
    (2, "Guitarist", "Acoustic and electric guitar"),
    (3, "Keyboardist", "Piano, keys and synths"),
    (4, "Drummer", "Drum kit and percussion"),
    (5, "Bassist", "Electric and upright bass"),
]

# Hourly rate range (min, max) per event category; id 7 is the default for slots
EVENT_CATEGORIES = [
    (1, "Wedding", (80, 150)),
    (2, "Corporate Event", (90, 180)),
    (3, "Birthday Party", (70, 120)),
    (4, "Concert", (100, 200)),
    (5, "Private Party", (75, 130)),
    (6, "Festival", (90, 180)),
    (7, "Club Performance", (60, 120)),
]

VENUES = [
    {"name": "Blue Note Jazz Club", "location": "Downtown", "capacity": 120, "pax_count": 100},
    {"name": "The Harmony Hall", "location": "Uptown", "capacity": 350, "pax_count": 300},
    {"name": "Rhythm & Brews", "location": "Riverside", "capacity": 80, "pax_count": 60},
    {"name": "Soundwave Lounge", "location": "Arts District", "capacity": 150, "pax_count": 120},
    {"name": "The Jazz Cellar", "location": "Old Town", "capacity": 70, "pax_count": 50},
    {"name": "Skyline Rooftop Bar", "location": "Downtown", "capacity": 200, "pax_count": 160},
]

MUSICIANS = [
    {"name": "Ella Thompson", "email": "ella.thompson@example.com", "category_id": 1, "pay_rate": 150, "instruments": ["Vocals"]},
    {"name": "Jack Wilson", "email": "jack.wilson@example.com", "category_id": 2, "pay_rate": 110, "instruments": ["Electric Guitar"]},
    {"name": "David Chen", "email": "david.chen@example.com", "category_id": 3, "pay_rate": 140, "instruments": ["Piano", "Organ"]},
    {"name": "Sarah Davis", "email": "sarah.davis@example.com", "category_id": 4, "pay_rate": 125, "instruments": ["Drums"]},
    {"name": "Robert Johnson", "email": "robert.johnson@example.com", "category_id": 5, "pay_rate": 120, "instruments": ["Upright Bass"]},
    {"name": "Maria Rodriguez", "email": "maria.rodriguez@example.com", "category_id": 1, "pay_rate": None, "instruments": ["Vocals"]},
]


def _seed_categories(db):
    for category_id, title, description in MUSICIAN_CATEGORIES:
        if db.get(Category, category_id):
            continue
        db.add(Category(id=category_id, title=title, description=description))
        logger.info(f"✅ Added musician category: {title}")

    for category_id, title, _ in EVENT_CATEGORIES:
        if db.get(EventCategory, category_id):
            continue
        db.add(EventCategory(id=category_id, title=title))
        logger.info(f"✅ Added event category: {title}")
    db.commit()


def _seed_venues(db):
    for venue in VENUES:
        if db.query(Venue).filter(Venue.name == venue["name"]).first():
            logger.info(f"ℹ️  Venue already exists: {venue['name']}")
            continue
        db.add(Venue(**venue))
        logger.info(f"✅ Added venue: {venue['name']}")
    db.commit()


def _seed_musicians(db):
    for data in MUSICIANS:
        if db.query(Musician).filter(Musician.name == data["name"]).first():
            logger.info(f"ℹ️  Musician already exists: {data['name']}")
            continue
        db.add(Musician(**data))
        logger.info(f"✅ Added musician: {data['name']}")
    db.commit()


def _seed_pay_rates(db):
    """Negotiated rates at the midpoint of each event category's range"""
    added = 0
    for musician in db.query(Musician).all():
        for category_id, title, (low, high) in EVENT_CATEGORIES:
            exists = (
                db.query(MusicianPayRate)
                .filter(
                    MusicianPayRate.musician_id == musician.id,
                    MusicianPayRate.event_category_id == category_id,
                )
                .first()
            )
            if exists:
                continue
            hourly = round((low + high) / 2)
            db.add(
                MusicianPayRate(
                    musician_id=musician.id,
                    event_category_id=category_id,
                    hourly_rate=hourly,
                    day_rate=hourly * 6,
                    event_rate=hourly * 4,
                    notes=f"Standard rate for {title}",
                )
            )
            added += 1
    db.commit()
    logger.info(f"✅ Added {added} pay rate(s)")


def seed():
    Base.metadata.create_all(bind=engine, checkfirst=True)
    db = SessionLocal()
    try:
        logger.info("🌱 Seeding reference data...")
        _seed_categories(db)
        _seed_venues(db)
        _seed_musicians(db)
        _seed_pay_rates(db)
        logger.info("✅ Reference data seeded")
    finally:
        db.close()


if __name__ == "__main__":
    try:
        seed()
    except Exception as e:
        logger.error(f"❌ Seeding failed: {e}")
        raise SystemExit(1) from e
