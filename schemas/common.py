"""
schemas/common.py

- Schemas shared by every router
- Pydantic v2
- Contents:
  1) error response: ErrorResponse
  2) success body helper: ok()
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# =========================================================
# 1) Error response
# =========================================================

class ErrorResponse(BaseModel):
    """
    Body returned by the global error handlers (middlewares/error_handler.py)
    - success: always False
    - message: human readable, shown as is by the front end
    - code: machine readable identifier (e.g. INVALID_PERFORMANCE_LEVEL)
    """
    success: bool = False
    message: str = Field(..., description="Human readable error message")
    code: Optional[str] = Field(default=None, description="Error identifier, e.g. NOT_FOUND")

    model_config = ConfigDict(extra="ignore")


# =========================================================
# 2) Success body
# =========================================================

def ok(data: Any = None, message: Optional[str] = None) -> dict:
    """Standard success body: {"success": True, "data": ..., "message": ...}"""
    body: dict = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    return body
