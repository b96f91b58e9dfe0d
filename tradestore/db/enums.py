"""Registered enumeration types for stored Enumeration columns.

Enumeration fields are resolved by name against this table when rows are
hydrated. Record registration adds the enums its fields declare; the
plug-in's LogLevel is always present.
"""

from enum import Enum
from typing import Dict, Optional, Type

from tradestore.core.log_helper import LogLevel


class EnumRegistry:
    """Name -> Enum class table used by the coercion engine."""

    def __init__(self) -> None:
        self._enums: Dict[str, Type[Enum]] = {}

    def register(self, enum_type: Type[Enum]) -> Type[Enum]:
        self._enums[enum_type.__name__] = enum_type
        return enum_type

    def resolve(self, name: str) -> Optional[Type[Enum]]:
        return self._enums.get(name)

    def unregister(self, name: str) -> None:
        self._enums.pop(name, None)

    def __contains__(self, name: str) -> bool:
        return name in self._enums


enum_registry = EnumRegistry()
enum_registry.register(LogLevel)
