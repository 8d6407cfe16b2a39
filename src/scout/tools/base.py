"""Tool definitions and argument binding.

Each tool declares its arguments as a dataclass. The JSON schema advertised
to the model is derived from that dataclass, and incoming arguments are bound
to it before the handler runs, so a handler always receives its declared
parameters with optional ones defaulted.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import types
import typing
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

_JSON_TYPES: dict[Any, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    dict: "object",
}


class ToolArgumentError(ValueError):
    """Arguments supplied by the model cannot be bound to the tool's parameters."""


@dataclass(frozen=True)
class NoArgs:
    """Argument struct for tools that take no parameters."""


def _json_type(annotation: Any) -> dict[str, Any]:
    origin = typing.get_origin(annotation)
    if origin in (typing.Union, types.UnionType):
        inner = [a for a in typing.get_args(annotation) if a is not type(None)]
        return _json_type(inner[0]) if inner else {"type": "string"}
    if origin in (list, tuple):
        args = typing.get_args(annotation)
        return {"type": "array", "items": _json_type(args[0]) if args else {}}
    if origin is dict:
        return {"type": "object"}
    return {"type": _JSON_TYPES.get(annotation, "string")}


def _has_default(f: dataclasses.Field) -> bool:
    return f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING


def parameters_schema(args: type, descriptions: dict[str, str] | None = None) -> dict[str, Any]:
    """Derive a JSON-schema object from an argument dataclass.

    Fields without a default are required; defaults are advertised.
    """
    descriptions = descriptions or {}
    hints = typing.get_type_hints(args)
    properties: dict[str, Any] = {}
    required: list[str] = []
    for f in dataclasses.fields(args):
        prop = _json_type(hints.get(f.name, str))
        if f.name in descriptions:
            prop["description"] = descriptions[f.name]
        if f.default is not dataclasses.MISSING and f.default is not None:
            prop["default"] = f.default
        properties[f.name] = prop
        if not _has_default(f):
            required.append(f.name)
    return {"type": "object", "properties": properties, "required": required}


@dataclass(frozen=True)
class ToolDefinition:
    """A named capability the model may request. Immutable once registered."""

    name: str
    description: str
    handler: Callable[..., str]
    args: type = NoArgs
    parameters: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.parameters:
            object.__setattr__(self, "parameters", parameters_schema(self.args))

    def schema(self) -> dict[str, Any]:
        """Function-tool descriptor in the shape chat backends expect."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def bind(self, arguments: dict[str, Any] | str | None) -> Any:
        """Build the argument struct. Only presence of required fields is checked."""
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments) if arguments.strip() else {}
            except json.JSONDecodeError as e:
                raise ToolArgumentError(f"arguments are not valid JSON: {e}") from e
        arguments = arguments or {}
        if not isinstance(arguments, dict):
            raise ToolArgumentError(f"arguments must be an object, got {type(arguments).__name__}")

        known = {f.name: f for f in dataclasses.fields(self.args)}
        unknown = set(arguments) - set(known)
        if unknown:
            logger.debug("Ignoring unknown arguments for %s: %s", self.name, sorted(unknown))

        missing = [
            name for name, f in known.items()
            if not _has_default(f) and arguments.get(name) is None
        ]
        if missing:
            raise ToolArgumentError(f"missing required argument(s): {', '.join(missing)}")

        # None means "not supplied" for optional fields.
        values = {k: v for k, v in arguments.items() if k in known and v is not None}
        return self.args(**values)

    def execute(self, arguments: dict[str, Any] | str | None) -> str:
        """Run the handler. Never raises; every failure becomes text for the model."""
        try:
            bound = self.bind(arguments)
        except ToolArgumentError as e:
            return f"Error: Invalid arguments for tool '{self.name}': {e}"
        try:
            result = self.handler(**dataclasses.asdict(bound))
        except Exception as e:
            logger.error("Tool %s failed: %s", self.name, e)
            return f"Error executing {self.name}: {e}"
        return result if isinstance(result, str) else str(result)
