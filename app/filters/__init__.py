"""Filter models for report query parameters."""

from .movement import Granularity, MovementFilter, OptionKind, is_absent_client

__all__ = ["Granularity", "MovementFilter", "OptionKind", "is_absent_client"]
