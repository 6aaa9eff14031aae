"""Report query composition."""

from .composer import (
    ComposedQuery,
    compose_detail,
    compose_options,
    compose_summary,
    compose_timeline,
)
from .predicates import Predicate, PredicateBuilder, build_predicate

__all__ = [
    "ComposedQuery",
    "Predicate",
    "PredicateBuilder",
    "build_predicate",
    "compose_detail",
    "compose_options",
    "compose_summary",
    "compose_timeline",
]
