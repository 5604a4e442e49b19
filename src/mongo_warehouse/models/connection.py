"""Pydantic model describing a fully resolved connection."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field


class ConnectionSettings(BaseModel):
    """Effective values after explicit arguments, parameters and defaults are merged."""

    host: str = Field(min_length=1)
    port: int = Field(ge=1, le=65535)
    timeout_seconds: float
    database_name: str = ""
    authenticate: bool = False
    user: str = ""
    password: str = ""

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def redacted(self) -> Dict[str, Any]:
        """Return the settings as a dict that is safe to log."""

        payload = self.model_dump()
        payload["password"] = "****" if self.password else ""
        return payload
