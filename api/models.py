"""
API response models for HtmxTodo's JSON endpoints.

The app is server-rendered; the only JSON surface is the health probe used
by load balancers and container orchestrators.
"""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for GET /api/v1/health.

    status is "healthy" when every component reports "ok", else "degraded".
    """

    status: Literal["healthy", "degraded"] = "healthy"
    version: str
    components: dict[str, Literal["ok", "error"]] = Field(default_factory=dict)
