#!/usr/bin/env python3
"""Print every member's replayed balances."""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db.base import SessionLocal
from app.core.config import settings
from app.services.balance import aggregate
from app.services.member import list_members_with_stats


def print_balances(active_only: bool = False):
    db = SessionLocal()
    try:
        rows = list_members_with_stats(db, "active" if active_only else None)
        if not rows:
            print("No members found.")
            return

        header = f"{'Member':<32} {'Lawas':>6} {'Put-up bal':>12} {'Hulam PU':>12} {'Hulam':>12} {'Interest':>12} {'Balance':>12}"
        print(header)
        print("-" * len(header))
        for row in rows:
            s = row.stats
            print(
                f"{row.member.full_name[:32]:<32} {s.total_lawas:>6.0f} "
                f"{s.put_up_balance(settings.PUT_UP_PER_LAWAS):>12} {s.outstanding_hulam_put_up:>12} "
                f"{s.outstanding_hulam:>12} {s.outstanding_interest:>12} {s.outstanding_balance:>12}"
            )

        totals = aggregate(row.stats for row in rows)
        print("-" * len(header))
        print(
            f"{'TOTAL':<32} {totals.total_lawas:>6.0f} "
            f"{totals.put_up_balance(settings.PUT_UP_PER_LAWAS):>12} {totals.outstanding_hulam_put_up:>12} "
            f"{totals.outstanding_hulam:>12} {totals.outstanding_interest:>12} {totals.outstanding_balance:>12}"
        )
    finally:
        db.close()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Print member balances")
    parser.add_argument("--active-only", action="store_true", help="Only list active members")
    args = parser.parse_args()

    print_balances(active_only=args.active_only)
