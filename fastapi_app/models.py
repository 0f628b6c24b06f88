from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class GenerateRequest(BaseModel):
    """POST /api body"""
    method: Optional[str] = None
    args: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("args", mode="before")
    @classmethod
    def validate_args(cls, v):
        """Treat a missing or null args object as empty"""
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("args must be an object")
        return v


class Capabilities(BaseModel):
    """GET /api response"""
    status: str = "operational"
    last_check_at: str
    methods: Dict[str, Dict[str, Any]]
