"""Base repository with shared Supabase client."""

from supabase._async.client import AsyncClient


class BaseRepository:
    """Base class for all repositories.

    Holds the service-role AsyncClient. Every query is awaited; ownership
    scoping (user_id filters) is the caller's job, not PostgREST RLS.
    """

    def __init__(self, client: AsyncClient) -> None:
        self.client = client
