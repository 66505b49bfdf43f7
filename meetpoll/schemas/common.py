"""Common response schemas."""
from pydantic import BaseModel
from typing import List, Optional, Union


class SuccessResponse(BaseModel):
    """Standard success response."""
    success: bool = True
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error body for documentation; validation errors carry a list."""
    detail: Union[str, List[str]]
