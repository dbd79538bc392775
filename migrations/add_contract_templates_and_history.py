"""
Add contract templates, per-date contract answers and status history

Migration to add:
- contract_templates table
- status_history table
- contracts.template_id
- contract_lines.status, response_notes, responded_at

Run with: python migrations/add_contract_templates_and_history.py
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect, text  # noqa: E402

from gigplanner.database import engine  # noqa: E402
from gigplanner.models import ContractTemplate, StatusHistory  # noqa: E402

NEW_COLUMNS = {
    "contracts": {
        "template_id": "INTEGER REFERENCES contract_templates(id)",
    },
    "contract_lines": {
        "status": "VARCHAR(20) NOT NULL DEFAULT 'pending'",
        "response_notes": "TEXT",
        "responded_at": "TIMESTAMP",
    },
}


def upgrade():
    """Create the new tables and add missing columns; safe to re-run"""
    for model in (ContractTemplate, StatusHistory):
        model.__table__.create(bind=engine, checkfirst=True)
        print(f"✅ {model.__tablename__} table ready")

    inspector = inspect(engine)
    with engine.begin() as conn:
        for table, columns in NEW_COLUMNS.items():
            existing_columns = {col["name"] for col in inspector.get_columns(table)}
            for name, ddl in columns.items():
                if name in existing_columns:
                    print(f"ℹ️  {table}.{name} column already exists")
                    continue
                conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}"))
                print(f"✅ Added {table}.{name} column")

        # Contracts answered before per-date responses existed answered every date
        conn.execute(
            text(
                "UPDATE contract_lines SET status = 'accepted' WHERE status = 'pending' "
                "AND contract_id IN (SELECT id FROM contracts WHERE status IN ('signed', 'completed'))"
            )
        )
        conn.execute(
            text(
                "UPDATE contract_lines SET status = 'rejected' WHERE status = 'pending' "
                "AND contract_id IN (SELECT id FROM contracts WHERE status = 'rejected')"
            )
        )
        print("✅ Backfilled answers for contracts that were already answered")


def downgrade():
    """Drop the columns and tables again"""
    inspector = inspect(engine)
    with engine.begin() as conn:
        for table, columns in NEW_COLUMNS.items():
            existing_columns = {col["name"] for col in inspector.get_columns(table)}
            for name in columns:
                if name in existing_columns:
                    conn.execute(text(f"ALTER TABLE {table} DROP COLUMN {name}"))
                    print(f"✅ Dropped {table}.{name} column")

    for model in (StatusHistory, ContractTemplate):
        model.__table__.drop(bind=engine, checkfirst=True)
        print(f"✅ Dropped {model.__tablename__} table")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "downgrade":
        downgrade()
    else:
        upgrade()
