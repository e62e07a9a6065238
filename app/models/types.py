"""
Custom column types for database models.

Provides JSON-backed types whose Python values keep their natural key types.
"""

from typing import Any

from sqlalchemy import JSON
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator


class GenerationStatsType(TypeDecorator):
    """
    Integer-keyed ``{generation: count}`` mapping stored as JSON.

    JSON objects only allow string keys, so keys are stringified on the
    way in and converted back to ``int`` on the way out.
    """

    impl = JSON
    cache_ok = True

    def process_bind_param(
        self, value: dict[int, int] | None, dialect: Dialect
    ) -> dict[str, int] | None:
        if value is None:
            return None
        return {str(int(generation)): int(count) for generation, count in value.items()}

    def process_result_value(
        self, value: dict[str, Any] | None, dialect: Dialect
    ) -> dict[int, int]:
        if not value:
            return {}
        return {int(generation): int(count) for generation, count in value.items()}


class IdListType(TypeDecorator):
    """List of integer ids stored as a JSON array."""

    impl = JSON
    cache_ok = True

    def process_bind_param(
        self, value: list[int] | None, dialect: Dialect
    ) -> list[int] | None:
        if value is None:
            return None
        return [int(item) for item in value]

    def process_result_value(
        self, value: list[Any] | None, dialect: Dialect
    ) -> list[int]:
        if not value:
            return []
        return [int(item) for item in value]
