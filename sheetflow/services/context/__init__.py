"""Context sheet transformation and caching."""

from .coercion import Parsed, ParseOutcome, Unparsed, coerce_value, try_parse_json
from .service import CONTEXT_SHEET, ContextService, context_cache_key
from .transformer import ContextTree, build_context_tree, transform

__all__ = [
    "CONTEXT_SHEET",
    "ContextService",
    "ContextTree",
    "ParseOutcome",
    "Parsed",
    "Unparsed",
    "build_context_tree",
    "coerce_value",
    "context_cache_key",
    "transform",
    "try_parse_json",
]
