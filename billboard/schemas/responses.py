"""Response envelopes shared by every endpoint"""

from typing import Generic, Optional, TypeVar
from pydantic import BaseModel


T = TypeVar('T')


class SuccessResponse(BaseModel, Generic[T]):
    """``{"success": true, "data": ..., "message": ...}``"""
    success: bool = True
    data: Optional[T] = None
    message: str = "Operation successful"


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """``{"success": false, "error": {"code": ..., "message": ...}}``"""
    success: bool = False
    error: ErrorDetail

    @classmethod
    def of(cls, code: str, message: str) -> dict:
        """Envelope as a JSON-ready dict for ``JSONResponse``"""
        return cls(error=ErrorDetail(code=code, message=message)).model_dump()
