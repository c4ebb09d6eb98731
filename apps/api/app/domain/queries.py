"""Listing query construction."""

from app.adapters.store.base import Query
from app.schemas.user import UserQueryOptions


def apply_query_options(query: Query, options: UserQueryOptions | None) -> Query:
    """Apply listing options in the fixed order order-by, start-after, limit.

    Cursor pagination is only meaningful relative to the sort, and the limit
    must count results after the cursor, so the order is never changed.
    """
    if options is None:
        return query

    if options.order_by is not None:
        query = query.order_by(options.order_by.field, options.order_by.sort_order)
    if options.start_after is not None:
        query = query.start_after(options.start_after)
    if options.limit:
        query = query.limit(options.limit)
    return query
