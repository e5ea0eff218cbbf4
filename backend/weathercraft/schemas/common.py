"""
Common Pydantic schemas (errors, messages).
"""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    message: str
    success: bool = True


class ErrorResponse(BaseModel):
    """Body of every error response; `error` is a stable machine-readable kind."""
    error: str
    message: str
