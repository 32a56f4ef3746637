"""
Close the open period and roll balances into a new one.
Usage: python scripts/close_period.py --name "FEB 2026" --start-date 2026-02-01 [--policy defer|charge]
"""
import sys
from datetime import date
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from app.db.base import SessionLocal
from app.core.exceptions import KapununganError
from app.services.ledger import get_open_period
from app.services.period import close_and_rollover, get_period


def close_period(name: str, start_date: date, end_date: date = None, period_id: int = None, policy: str = None):
    """Close ``period_id`` (or the open period) and carry balances forward."""
    db = SessionLocal()
    try:
        current = get_period(db, period_id) if period_id else get_open_period(db)
        if not current:
            print("No open period found. Nothing to close.")
            return

        print(f"Closing period: {current.name} (ID: {current.id})")
        result = close_and_rollover(
            db,
            current.id,
            name=name,
            start_date=start_date,
            end_date=end_date,
            interest_policy=policy,
        )
        print(f"✅ Opened period: {result.new_period.name} (ID: {result.new_period.id})")
        print(f"   Members carried forward: {result.carried_forward_count}")
    except KapununganError as e:
        print(f"❌ {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Close the current period and start the next one")
    parser.add_argument("--name", required=True, help='New period name, e.g. "FEB 2026"')
    parser.add_argument("--start-date", required=True, type=date.fromisoformat, help="New period start date (YYYY-MM-DD)")
    parser.add_argument("--end-date", type=date.fromisoformat, help="New period end date (YYYY-MM-DD)")
    parser.add_argument("--period-id", type=int, help="Period to close (defaults to the open period)")
    parser.add_argument("--policy", choices=["defer", "charge"], help="Interest on carried-forward principal")

    args = parser.parse_args()

    close_period(
        name=args.name,
        start_date=args.start_date,
        end_date=args.end_date,
        period_id=args.period_id,
        policy=args.policy,
    )
