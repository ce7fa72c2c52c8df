"""Host-provided settings for the MCP server."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

ENABLED_ENV = "CHAT_MCP_ENABLED"
PORT_ENV = "CHAT_MCP_PORT"


class McpSettings(BaseModel):
    """Enable flag and port, read at activation and on restart."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    port: int = Field(default=3000, ge=0, le=65535)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> McpSettings:
        """Load settings from ``CHAT_MCP_*`` environment variables.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value.
        """
        environ = os.environ if environ is None else environ
        values: dict[str, str] = {}
        if ENABLED_ENV in environ:
            values["enabled"] = environ[ENABLED_ENV]
        if PORT_ENV in environ:
            values["port"] = environ[PORT_ENV]
        return cls.model_validate(values)
