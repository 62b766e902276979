"""
Pet Butler - Supabase Client.

Low-level database access. The client is built once at startup by
pet_butler.services and handed to the gateway; there is no module-level
instance.
"""

from supabase import Client, ClientOptions, create_client

from pet_butler.config import Settings

# Tables the bot reads and writes
TABLES = ["users", "pets"]


def create_supabase_client(settings: Settings) -> Client:
    """
    Create a Supabase client with the service key.

    Every PostgREST request is bounded by settings.db_timeout_seconds.
    """
    return create_client(
        settings.supabase_url,
        settings.supabase_service_key,
        options=ClientOptions(postgrest_client_timeout=settings.db_timeout_seconds),
    )


def check_tables(client: Client) -> dict[str, int | str]:
    """
    Count rows in each table the bot uses.

    Returns table name -> row count, or the error text if the table
    could not be read.
    """
    status: dict[str, int | str] = {}
    for table in TABLES:
        try:
            result = client.table(table).select("*", count="exact").limit(0).execute()
            status[table] = result.count if result.count is not None else 0
        except Exception as e:
            status[table] = str(e)
    return status
