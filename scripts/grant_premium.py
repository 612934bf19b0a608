"""Grant or revoke premium by hand (support tickets, refunds outside the store).

    python scripts/grant_premium.py 42 --until 2026-12-31T00:00:00+00:00
    python scripts/grant_premium.py 42 --lifetime --package-id 3
    python scripts/grant_premium.py 42 --revoke
"""

import argparse
from datetime import datetime, timezone

from app.db.session import SessionLocal
from app.models.user import User
from app.services.entitlement_sync import manual_override

def _parse_until(value: str) -> datetime:
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)

def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("user_id", type=int)
    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument("--until", type=_parse_until, help="ISO-8601 end of access")
    action.add_argument("--lifetime", action="store_true")
    action.add_argument("--revoke", action="store_true")
    parser.add_argument("--package-id", type=int, default=None)
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        if db.get(User, args.user_id) is None:
            print(f"User {args.user_id} not found")
            return 1
        result = manual_override(
            db,
            user_id=args.user_id,
            revoke=args.revoke,
            until=args.until,
            package_id=args.package_id,
        )
    finally:
        db.close()

    if not result.changed:
        print("No change: a later or longer entitlement is already recorded")
        return 1
    print(f"User {args.user_id}: status={result.state.status.value} until={result.state.premium_until}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
