"""
Generic response schemas
"""

from pydantic import BaseModel
from typing import Any, Optional, Dict


class ErrorResponse(BaseModel):
    """Error envelope shared by every endpoint"""
    ok: bool = False
    error: str
    details: Optional[Dict[str, Any]] = None
