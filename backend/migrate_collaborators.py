"""One-time conversion of legacy plain-email collaborators.

Run once before first use of a database written by the old client:

    python backend/migrate_collaborators.py
"""
import logging

from seenlist.db import SessionLocal
from seenlist.services.migration_service import migrate_collaborators


def main():
    logging.basicConfig(level=logging.INFO)
    db = SessionLocal()
    try:
        migrated = migrate_collaborators(db)
        print(f"✅ Migration completed. {migrated} lists updated.")
    except Exception as e:
        print(f"❌ Migration failed: {str(e)}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
