"""
Add fee override and attendance fields to planner_assignments

Migration to add:
- fee_overridden (manual fees survive slot edits)
- attendance_marked_at
- attendance_marked_by

Run with: python migrations/add_assignment_attendance_fields.py
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect, text  # noqa: E402

from gigplanner.database import engine  # noqa: E402

NEW_COLUMNS = {
    "fee_overridden": "BOOLEAN NOT NULL DEFAULT FALSE",
    "attendance_marked_at": "TIMESTAMP",
    "attendance_marked_by": "INTEGER REFERENCES users(id)",
}


def upgrade():
    """Add the columns that are missing; safe to re-run"""
    existing_columns = {col["name"] for col in inspect(engine).get_columns("planner_assignments")}

    with engine.begin() as conn:
        for name, ddl in NEW_COLUMNS.items():
            if name in existing_columns:
                print(f"ℹ️  {name} column already exists")
                continue
            conn.execute(text(f"ALTER TABLE planner_assignments ADD COLUMN {name} {ddl}"))
            print(f"✅ Added {name} column")

        # Fees entered before this migration that differ from zero were typed by hand
        if "fee_overridden" not in existing_columns:
            conn.execute(
                text(
                    "UPDATE planner_assignments SET fee_overridden = TRUE "
                    "WHERE actual_fee IS NOT NULL AND actual_fee > 0"
                )
            )
            print("✅ Marked existing fees as overrides")


def downgrade():
    """Remove the columns again"""
    existing_columns = {col["name"] for col in inspect(engine).get_columns("planner_assignments")}

    with engine.begin() as conn:
        for name in NEW_COLUMNS:
            if name in existing_columns:
                conn.execute(text(f"ALTER TABLE planner_assignments DROP COLUMN {name}"))
                print(f"✅ Dropped {name} column")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "downgrade":
        downgrade()
    else:
        upgrade()
