import logging
from functools import lru_cache
from typing import Optional, Dict, Any, List
from supabase import create_client, acreate_client, Client, AsyncClient
from postgrest.exceptions import APIError
from .config import get_settings
from .exceptions import StoreError

logger = logging.getLogger(__name__)

QUERY_TYPES = ("select", "insert", "upsert", "update", "delete")

_async_client: Optional[AsyncClient] = None


def _credentials():
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_key:
        raise ValueError(
            "SUPABASE_URL and SUPABASE_KEY must be set in environment variables"
        )
    return settings.supabase_url, settings.supabase_key


@lru_cache()
def get_supabase_client() -> Client:
    """Get the shared Supabase client instance, creating it on first use."""
    url, key = _credentials()
    logger.info(f"Creating Supabase client for {url}")
    return create_client(url, key)


async def get_async_supabase_client() -> AsyncClient:
    """
    Get the shared async Supabase client.

    Realtime channels are only available on the async client, so the change
    feed subscriptions go through this one.
    """
    global _async_client
    if _async_client is None:
        url, key = _credentials()
        _async_client = await acreate_client(url, key)
    return _async_client


def _apply_filters(query, filters: Optional[Dict[str, Any]]):
    for key, value in (filters or {}).items():
        if isinstance(value, dict):
            operator, operand = next(iter(value.items()))
            if operator == "eq":
                query = query.eq(key, operand)
            elif operator == "neq":
                query = query.neq(key, operand)
            elif operator == "in":
                query = query.in_(key, list(operand))
            else:
                raise ValueError(f"Unsupported filter operator: {operator}")
        else:
            query = query.eq(key, value)
    return query


async def execute_query(
    table: str,
    query_type: str,
    data: Optional[Dict[str, Any]] = None,
    filters: Optional[Dict[str, Any]] = None,
    select: str = "*",
    limit: Optional[int] = None,
    order_by: Optional[Dict[str, str]] = None,
    or_filter: Optional[str] = None,
    on_conflict: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Execute a query on the Supabase database.

    Args:
        table: The table to query
        query_type: The type of query (select, insert, upsert, update, delete)
        data: The row to insert, upsert or the columns to update
        filters: Equality filters, or {"neq": v} / {"in": [...]} per column
        select: The columns to select
        limit: The maximum number of rows to return
        order_by: The columns to order by, e.g. {"created_at": "desc"}
        or_filter: A PostgREST `or` expression, e.g. "from_user_id.eq.1,to_user_id.eq.1"
        on_conflict: Comma separated conflict columns for upserts

    Returns:
        The rows returned by the store

    Raises:
        StoreError: the store rejected the operation or could not be reached
    """
    if query_type not in QUERY_TYPES:
        raise ValueError(f"Invalid query type: {query_type}")
    if query_type in ("insert", "upsert", "update") and not data:
        raise ValueError(f"Data is required for {query_type} operations")
    if query_type in ("update", "delete") and not filters:
        raise ValueError(f"Filters are required for {query_type} operations")

    logger.debug(f"Executing {query_type} on table {table} filters={filters} or={or_filter}")

    client = get_supabase_client()

    try:
        query = client.table(table)

        if query_type == "select":
            query = _apply_filters(query.select(select), filters)
            if or_filter:
                query = query.or_(or_filter)
            for key, direction in (order_by or {}).items():
                query = query.order(key, desc=direction.lower() == "desc")
            if limit:
                query = query.limit(limit)
        elif query_type == "insert":
            query = query.insert(data)
        elif query_type == "upsert":
            query = query.upsert(data, on_conflict=on_conflict or "", ignore_duplicates=True)
        elif query_type == "update":
            query = _apply_filters(query.update(data), filters)
        else:
            query = _apply_filters(query.delete(), filters)

        result = query.execute()
        return result.data or []

    except APIError as e:
        logger.error(f"Store rejected {query_type} on {table}: {e.message} (code={e.code})")
        raise StoreError(e.message or "The data store rejected the operation", code=e.code) from e
    except Exception as e:
        logger.error(f"Error executing {query_type} on {table}: {e!r}")
        raise StoreError(f"Data store request failed: {e}") from e


async def fetch_one(table: str, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Return the first row matching `filters`, or None."""
    rows = await execute_query(table=table, query_type="select", filters=filters, limit=1)
    return rows[0] if rows else None
