"""
Grant Admin Script
Promotes profiles to the admin role by email (or demotes them with --revoke).
Needs SUPABASE_SERVICE_ROLE_KEY, since profiles.role is not writable with the anon key.

Usage:
    python -m app.scripts.grant_admin alice@example.com bob@example.com
    python -m app.scripts.grant_admin --revoke alice@example.com
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.database.supabase_client import SupabaseClient
from supabase import Client
from typing import List, Optional
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def set_role(supabase: Client, emails: List[str], role: str) -> int:
    """Set role on the profile of every email; returns how many profiles changed"""
    changed = 0
    for email in emails:
        try:
            existing = supabase.table("profiles")\
                .select("id, role, is_deleted")\
                .eq("email", email)\
                .limit(1)\
                .execute()

            if not existing.data:
                logger.warning(f"No profile found for {email}")
                continue

            profile = existing.data[0]
            if profile.get("is_deleted"):
                logger.warning(f"Profile {email} is deactivated, skipping")
                continue
            if profile.get("role") == role:
                logger.info(f"{email} already has role {role}")
                continue

            supabase.table("profiles")\
                .update({"role": role})\
                .eq("id", profile["id"])\
                .execute()
            changed += 1
            logger.info(f"Set role of {email} to {role}")
        except Exception as e:
            logger.error(f"Error updating role of {email}: {e}")
    return changed


def main(argv: Optional[List[str]] = None, supabase: Optional[Client] = None) -> int:
    parser = argparse.ArgumentParser(description="Grant or revoke the admin role")
    parser.add_argument("emails", nargs="+", help="Profile emails")
    parser.add_argument("--revoke", action="store_true", help="Demote to an ordinary user instead")
    args = parser.parse_args(argv)

    try:
        supabase = supabase or SupabaseClient.get_service_client()
        role = "user" if args.revoke else "admin"
        changed = set_role(supabase, args.emails, role)
        logger.info(f"Done: {changed} of {len(args.emails)} profile(s) changed")
        return 0
    except Exception as e:
        logger.error(f"Error changing roles: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
