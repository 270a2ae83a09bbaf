"""
Shared type aliases.
"""

from typing import Any, TypeAlias

JSONValue: TypeAlias = dict[str, Any] | list[Any] | str | int | float | bool | None
QueryParams: TypeAlias = dict[str, str | int | float]
