"""
Pet Butler - Database Client.

Supabase access for the users and pets tables.
"""

from pet_butler.db.client import check_tables, create_supabase_client

__all__ = [
    "create_supabase_client",
    "check_tables",
]
