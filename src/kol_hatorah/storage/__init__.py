from kol_hatorah.storage.schemas import ScopeFilter, Segment, SegmentRow, WorkCount, WorkRow
from kol_hatorah.storage.sqlite import (
    SQLiteLexicalStore,
    StorageError,
    all_terms_expression,
    build_scope_where,
    open_store,
    term_match_expression,
)

__all__ = [
    "ScopeFilter",
    "Segment",
    "SegmentRow",
    "WorkCount",
    "WorkRow",
    "SQLiteLexicalStore",
    "StorageError",
    "all_terms_expression",
    "build_scope_where",
    "open_store",
    "term_match_expression",
]
