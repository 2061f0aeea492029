import logging
from typing import Any, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, AsyncClientOptions, Client, ClientOptions, acreate_client, create_client

from app.config.settings import settings
from app.core.exceptions import (
    BackendError, BackendTimeoutError, ConflictError, GroupsError, InvalidInputError, NotAuthorizedError,
    NotFoundError
)

logger = logging.getLogger(__name__)

# Postgres / PostgREST error codes we surface distinctly
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
INSUFFICIENT_PRIVILEGE = "42501"
NO_ROWS = "PGRST116"
NO_DATA_FOUND = "P0002"
INVALID_TEXT_REPRESENTATION = "22P02"


class SupabaseClient:
    _client: Client = None
    _async_client: Optional[AsyncClient] = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(
                settings.supabase_url,
                settings.supabase_key,
                options=ClientOptions(postgrest_client_timeout=settings.supabase_timeout_seconds),
            )
        return cls._client

    @classmethod
    async def get_async_client(cls) -> AsyncClient:
        """Async client for Realtime channels. Uses the service role key when configured."""
        if cls._async_client is None:
            cls._async_client = await acreate_client(
                settings.supabase_url,
                settings.supabase_service_role_key or settings.supabase_key,
                options=AsyncClientOptions(postgrest_client_timeout=settings.supabase_timeout_seconds),
            )
        return cls._async_client

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._async_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def translate_api_error(e: APIError) -> GroupsError:
    """Map a PostgREST error onto the service error hierarchy."""
    code = getattr(e, "code", None)
    message = getattr(e, "message", None) or str(e)
    if code == UNIQUE_VIOLATION:
        return ConflictError(message)
    if code == INVALID_TEXT_REPRESENTATION:
        return InvalidInputError(message)
    if code == INSUFFICIENT_PRIVILEGE:
        return NotAuthorizedError(message)
    if code in (NO_ROWS, NO_DATA_FOUND, FOREIGN_KEY_VIOLATION):
        return NotFoundError(message)
    return BackendError(message)


def execute(request: Any):
    """Run a query builder and translate backend failures into typed errors."""
    try:
        return request.execute()
    except APIError as e:
        error = translate_api_error(e)
        logger.warning(f"Supabase request rejected ({getattr(e, 'code', None)}): {error.detail}")
        raise error from e
    except httpx.TimeoutException as e:
        logger.error(f"Supabase request timed out: {e}")
        raise BackendTimeoutError("Backend request timed out") from e
    except httpx.HTTPError as e:
        logger.error(f"Supabase request failed: {e}")
        raise BackendError(f"Backend request failed: {e}") from e
