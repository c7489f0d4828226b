"""Service-role Supabase client construction."""

from supabase import create_client, Client

from screenclip.config import Settings
from screenclip.errors import ConfigurationError


def build_supabase(settings: Settings) -> Client:
    """Create the Supabase client using the service role key.

    Built once at start-up and handed to the store, storage and auth
    adapters; nothing imports it as a module global.
    """
    if not settings.supabase_configured:
        raise ConfigurationError(
            "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set"
        )
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key,
    )
