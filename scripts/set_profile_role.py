#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from lokal.core.database import SessionLocal  # noqa: E402
from lokal.services.profiles import set_profile_role  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Promote or demote an existing Lokal profile.")
    parser.add_argument("--email", required=True, help="Email of the signed-up user")
    parser.add_argument("--role", default="admin", choices=["admin", "consumer"], help="Role to assign")
    return parser.parse_args()


def main() -> int:
    args = parse_args()

    db = SessionLocal()
    try:
        profile = set_profile_role(db, email=args.email, role=args.role)
    except ValueError as exc:
        print(str(exc))
        return 1
    finally:
        db.close()

    if profile is None:
        print(f"No profile found for {args.email}. The user must sign in once first.")
        return 1

    print(f"Profile {profile.id} ({profile.email}) is now {profile.role}.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
