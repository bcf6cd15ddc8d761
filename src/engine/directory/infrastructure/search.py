"""Helpers shared by the repository search queries."""

LIKE_ESCAPE = "\\"


def contains_pattern(query: str) -> str:
    """Build an ILIKE pattern matching the query as a literal substring.

    Use together with ``escape=LIKE_ESCAPE``.
    """
    escaped = (
        query.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"
