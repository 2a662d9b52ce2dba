"""
vinscan/errors.py

Error taxonomy raised by the service layer. Each class is an HTTPException,
so a service can raise it directly and FastAPI turns it into the matching
status code without any per-route translation.

 - ValidationError : malformed, missing, or out-of-range input (400)
 - NotFoundError   : asset, record, target asset, or user absent (404)
 - AuthError       : missing, invalid, or expired credential (401)
 - ConflictError   : e.g. email already registered (401 by convention)
 - InternalError   : unexpected storage/backend failure (500)
"""

from typing import Optional, Dict

from fastapi import HTTPException


class ValidationError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=404, detail=detail)


class AuthError(HTTPException):
    def __init__(self, detail: str = "Not authenticated", headers: Optional[Dict[str, str]] = None):
        super().__init__(
            status_code=401,
            detail=detail,
            headers=headers or {"WWW-Authenticate": "Bearer"},
        )


class ConflictError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=401, detail=detail)


class InternalError(HTTPException):
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=500, detail=detail)
