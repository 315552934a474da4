"""Opaque build-graph rule objects."""

from __future__ import annotations

from typing import Any


class Rule:
    """A build rule: kind, name, public attributes and private attributes.

    Private attributes carry generator state (such as the unresolved import
    list) between the generate and resolve phases and are never serialized.
    """

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        self._attrs: dict[str, Any] = {}
        self._private: dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"Rule({self.kind!r}, {self.name!r})"

    def set_attr(self, key: str, value: Any) -> None:
        self._attrs[key] = value

    def attr(self, key: str, default: Any = None) -> Any:
        return self._attrs.get(key, default)

    def attr_string(self, key: str) -> str:
        """Return a string attribute, or ``""`` when unset or not a string."""
        value = self._attrs.get(key)
        return value if isinstance(value, str) else ""

    def del_attr(self, key: str) -> None:
        self._attrs.pop(key, None)

    def attr_keys(self) -> list[str]:
        return sorted(self._attrs)

    def set_private_attr(self, key: str, value: Any) -> None:
        self._private[key] = value

    def private_attr(self, key: str) -> Any:
        return self._private.get(key)

    def to_dict(self) -> dict[str, Any]:
        """Serializable form with attributes in sorted key order."""
        return {
            "kind": self.kind,
            "name": self.name,
            "attrs": {key: self._attrs[key] for key in sorted(self._attrs)},
        }


__all__ = ["Rule"]
