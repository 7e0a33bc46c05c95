"""Typed tree for JSON/TOML configuration documents.

Agent config files and plugin side files (.mcp.json) are loaded into
this tree instead of being passed around as nested dicts of Any. Each
node is one of six frozen types; accessors return None on a type
mismatch so callers read optional structure without isinstance chains.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union


@dataclass(frozen=True)
class ConfigNull:
    def to_python(self) -> None:
        return None


@dataclass(frozen=True)
class ConfigBool:
    value: bool

    def to_python(self) -> bool:
        return self.value


@dataclass(frozen=True)
class ConfigNumber:
    value: int | float

    def to_python(self) -> int | float:
        return self.value


@dataclass(frozen=True)
class ConfigString:
    value: str

    def to_python(self) -> str:
        return self.value


@dataclass(frozen=True)
class ConfigArray:
    items: tuple["ConfigNode", ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def to_python(self) -> list[Any]:
        return [item.to_python() for item in self.items]


@dataclass(frozen=True)
class ConfigObject:
    entries: dict[str, "ConfigNode"] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: str) -> bool:
        return key in self.entries

    def keys(self) -> list[str]:
        """Keys in document order."""
        return list(self.entries)

    def get(self, key: str) -> "ConfigNode | None":
        return self.entries.get(key)

    def get_object(self, key: str) -> "ConfigObject | None":
        node = self.entries.get(key)
        return node if isinstance(node, ConfigObject) else None

    def get_array(self, key: str) -> ConfigArray | None:
        node = self.entries.get(key)
        return node if isinstance(node, ConfigArray) else None

    def get_str(self, key: str) -> str | None:
        node = self.entries.get(key)
        return node.value if isinstance(node, ConfigString) else None

    def get_bool(self, key: str) -> bool | None:
        node = self.entries.get(key)
        return node.value if isinstance(node, ConfigBool) else None

    def to_python(self) -> dict[str, Any]:
        return {key: node.to_python() for key, node in self.entries.items()}


ConfigNode = Union[ConfigObject, ConfigArray, ConfigString, ConfigNumber, ConfigBool, ConfigNull]


def from_python(value: Any) -> ConfigNode:
    """Build a tree from decoded JSON/TOML data.

    Raises:
        TypeError: If *value* contains a type JSON cannot express.
    """
    if value is None:
        return ConfigNull()
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return ConfigBool(value)
    if isinstance(value, (int, float)):
        return ConfigNumber(value)
    if isinstance(value, str):
        return ConfigString(value)
    if isinstance(value, (list, tuple)):
        return ConfigArray(tuple(from_python(item) for item in value))
    if isinstance(value, dict):
        return ConfigObject({str(key): from_python(item) for key, item in value.items()})
    msg = f"Unsupported config value of type {type(value).__name__}"
    raise TypeError(msg)


def load_json_tree(path: Path) -> ConfigNode:
    """Read and decode a JSON file into a tree.

    Raises:
        OSError: If the file cannot be read.
        json.JSONDecodeError: If the content is not JSON.
    """
    return from_python(json.loads(path.read_text()))
