"""Backfill notification preferences for existing users.

Seeds one preference row per configured (category, type) pair for every
user, skipping rows that already exist. Each user is seeded in its own
transaction so one failure does not roll back the others.

Usage:
    python scripts/backfill_notification_preferences.py
"""

from app.database import SessionLocal, init_db
from app.repositories.factory import RepositoryFactory
from app.services.notification_preference_service import NotificationPreferenceService


def backfill() -> int:
    """Seed default preferences for all users. Returns the number of rows created."""
    init_db()
    db = SessionLocal()
    created_total = 0
    failed = 0
    try:
        print("Starting notification preference backfill...")
        user_ids = RepositoryFactory.create_user_repository(db).list_all_ids()
        print(f"Found {len(user_ids)} users")

        service = NotificationPreferenceService(db)
        for user_id in user_ids:
            try:
                created = service.seed_default_preferences(user_id)
            except Exception as e:
                failed += 1
                print(f"  ✗ {user_id}: {e}")
                continue
            created_total += created
            if created:
                print(f"  ✓ {user_id}: {created} preferences created")

        print(
            f"\nBackfill complete! Created {created_total} preferences "
            f"({failed} users failed)"
        )
        return created_total
    finally:
        db.close()


if __name__ == "__main__":
    backfill()
