# scripts/setup/create_admin.py
"""
Create or promote an administrator profile.
The account itself lives in the identity provider; pass its user id here.
Usage: python scripts/setup/create_admin.py --user-id <uuid> --email admin [--name "System Admin"]
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import SessionLocal, create_tables
from app.models.profile import Profile, ROLE_ADMIN
from app.utils.auth import normalize_login_email, sign_token


def upsert_admin(db, user_id: str, email: str, full_name: str, department: str) -> Profile:
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if not profile:
        profile = Profile(id=user_id, email=email)
        db.add(profile)
    profile.email = email
    profile.full_name = full_name
    profile.department = department
    profile.role = ROLE_ADMIN
    db.commit()
    return profile


def main():
    parser = argparse.ArgumentParser(description="Configure an admin profile")
    parser.add_argument("--user-id", required=True, help="User id issued by the identity provider")
    parser.add_argument("--email", default="admin", help="Email or keyword (e.g. admin)")
    parser.add_argument("--name", default="System Admin")
    parser.add_argument("--department", default="IT")
    parser.add_argument("--print-token", action="store_true", help="Print a test bearer token")
    args = parser.parse_args()

    email = normalize_login_email(args.email)
    create_tables()
    db = SessionLocal()
    try:
        profile = upsert_admin(db, args.user_id, email, args.name, args.department)
        print(f"Admin profile ready: {profile.email} ({profile.id})")
    except Exception as e:
        db.rollback()
        print(f"Error updating profile: {e}")
        sys.exit(1)
    finally:
        db.close()

    if args.print_token:
        print(f"Bearer token: {sign_token(args.user_id)}")


if __name__ == "__main__":
    main()
