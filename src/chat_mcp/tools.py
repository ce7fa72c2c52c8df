"""Tool definitions and the fixed tool registry."""

from __future__ import annotations

from collections.abc import Awaitable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict

from pydantic import BaseModel, ConfigDict, ValidationError

from chat_mcp.errors import InvalidArgumentsError, UnknownToolError

ToolHandler = Callable[[Dict[str, Any]], Awaitable[str]]


class ToolParameters(BaseModel):
    """Base parameters schema for MCP tools."""

    model_config = ConfigDict(extra="forbid")


@dataclass(frozen=True)
class ToolDefinition:
    """Description of a tool exposed by the server.

    Attributes:
        name: Unique name of the tool.
        description: Human-readable description of the tool purpose.
        parameters_model: Pydantic model used to validate input parameters.
        handler: Coroutine function that executes the tool and returns a
            short text summary.
    """

    name: str
    description: str
    parameters_model: type[ToolParameters]
    handler: ToolHandler

    @property
    def defaults(self) -> Dict[str, Any]:
        """Return the default value of every optional parameter."""

        return {
            field_name: field.default
            for field_name, field in self.parameters_model.model_fields.items()
            if not field.is_required()
        }

    @property
    def input_schema(self) -> Dict[str, Any]:
        """Return the JSON schema advertised for the tool's arguments."""

        return self.parameters_model.model_json_schema()

    def validate(self, parameters: Mapping[str, Any]) -> Dict[str, Any]:
        """Validate incoming arguments and fill in declared defaults.

        Args:
            parameters: Input arguments provided for the tool.

        Raises:
            InvalidArgumentsError: If the arguments do not fit the schema.

        Returns:
            Validated argument dictionary with defaults applied.
        """

        try:
            model = self.parameters_model(**parameters)
        except ValidationError as error:
            raise InvalidArgumentsError(
                f"Invalid arguments for tool '{self.name}'",
                details=error.errors(include_url=False),
            ) from error
        return model.model_dump()

    def metadata(self) -> Dict[str, Any]:
        """Return a discovery-friendly description of the tool."""

        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class ToolRegistry:
    """Immutable catalog mapping tool names to their definitions.

    The catalog is fixed at construction. Adding a tool means passing one
    more definition here, never registering at runtime.
    """

    def __init__(self, tools: Iterable[ToolDefinition]) -> None:
        """Build the catalog.

        Raises:
            ValueError: If two definitions share a name.
        """
        catalog: dict[str, ToolDefinition] = {}
        for tool in tools:
            if tool.name in catalog:
                raise ValueError(f"Tool '{tool.name}' is already registered")
            catalog[tool.name] = tool
        self._tools: Mapping[str, ToolDefinition] = MappingProxyType(catalog)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def names(self) -> list[str]:
        """List the names of registered tools in catalog order."""
        return list(self._tools)

    def get(self, name: str) -> ToolDefinition:
        """Look up a tool by name.

        Raises:
            UnknownToolError: If no tool with that name exists.
        """
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name) from None

    def catalog(self) -> list[dict[str, Any]]:
        """Produce the ``list_tools`` catalog entries."""
        return [tool.metadata() for tool in self._tools.values()]
