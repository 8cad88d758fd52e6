from inkweld_mcp.search.scoring import (
    FieldMatch,
    capped_limit,
    dedupe_best,
    match_text,
    search_in_object,
    truncate_value,
)

__all__ = [
    "FieldMatch",
    "capped_limit",
    "dedupe_best",
    "match_text",
    "search_in_object",
    "truncate_value",
]
