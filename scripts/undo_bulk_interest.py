#!/usr/bin/env python3
"""
List or undo "pay all interest" batches.
Usage:
    python scripts/undo_bulk_interest.py            # list batches
    python scripts/undo_bulk_interest.py --batch 7  # undo batch 7
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db.base import SessionLocal
from app.core.exceptions import KapununganError
from app.services.ledger import list_batches, undo_bulk_payment


def show_batches(db):
    batches = list_batches(db)
    if not batches:
        print("No bulk interest batches found.")
        return

    print("Bulk interest batches:")
    for batch in batches:
        state = f"undone {batch.undone_at:%Y-%m-%d %H:%M}" if batch.undone_at else "active"
        print(
            f"  ID: {batch.id} - period {batch.period_id} - {batch.entry_count} entries, "
            f"₱{batch.total_amount} ({state})"
        )


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Undo a bulk interest payment")
    parser.add_argument("--batch", type=int, help="Batch ID to undo (omit to list batches)")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        if args.batch is None:
            show_batches(db)
            return
        deleted = undo_bulk_payment(db, args.batch)
        print(f"✅ Done! Deleted {deleted} entries from batch {args.batch}.")
    except KapununganError as e:
        print(f"❌ {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
