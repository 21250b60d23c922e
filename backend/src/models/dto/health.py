from typing import Any

from pydantic import BaseModel


class HealthDetailedResponse(BaseModel):
    status: str
    version: str | None = None
    checks: dict[str, Any]
