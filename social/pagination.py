"""
================================================================================
DRIFNET - KEYSET PAGINATION
================================================================================

Cursor pagination for feeds and search results.

A cursor is the id of the last row the client received. The next page is
computed by looking up that row's sort keys and keeping only rows strictly
after them in the ordering:

    ordering = ['-engagement_count', '-comment_count', '-id']

    engagement_count < c.engagement_count
    OR (engagement_count = c.engagement_count AND comment_count < c.comment_count)
    OR (engagement_count = c.engagement_count AND comment_count = c.comment_count
        AND id < c.id)

The ordering must end with a unique key (id) so that ties are broken the
same way on every page; pages then never repeat or skip a row.

Annotated keys (counts) are compared like regular columns, so the queryset
passed in must already carry the annotations named in the ordering.
================================================================================
"""

from django.db.models import Q


def _split(key):
    if key.startswith('-'):
        return key[1:], 'lt'
    return key, 'gt'


def keyset_filter(ordering, cursor_values):
    """Build the Q object selecting rows strictly after ``cursor_values``."""
    condition = Q()
    for position, key in enumerate(ordering):
        field, lookup = _split(key)
        clause = Q(**{f'{field}__{lookup}': cursor_values[field]})
        for previous in ordering[:position]:
            previous_field, _ = _split(previous)
            clause &= Q(**{previous_field: cursor_values[previous_field]})
        condition |= clause
    return condition


def paginate(queryset, ordering, cursor=None, limit=10, lookup=None):
    """
    Return ``(rows, has_more)`` for the page after ``cursor``.

    Args:
        queryset: Filtered, annotated queryset to page through
        ordering: Sort keys, last one unique
        cursor: Id of the last row of the previous page (or None)
        limit: Page size; one extra row is fetched to detect more pages
        lookup: Queryset used to read the cursor row's keys; defaults to
                ``queryset``. Pass the unfiltered base when the cursor row
                may have dropped out of the filter since the last page.

    An unknown cursor yields an empty page.
    """
    queryset = queryset.order_by(*ordering)
    if cursor:
        fields = [_split(key)[0] for key in ordering]
        source = queryset if lookup is None else lookup
        cursor_values = source.filter(pk=cursor).values(*fields).first()
        if cursor_values is None:
            return [], False
        queryset = queryset.filter(keyset_filter(ordering, cursor_values))

    rows = list(queryset[:limit + 1])
    has_more = len(rows) > limit
    return rows[:limit], has_more
