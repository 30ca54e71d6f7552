"""
Shared response envelopes and field types
"""

from pydantic import BaseModel, BeforeValidator
from typing import Annotated, Optional

from app.services.sanitize import to_number

# Decimal / numeric string / number rendered as a JSON number; None stays None
Number = Annotated[Optional[float], BeforeValidator(to_number)]


class OkResponse(BaseModel):
    ok: bool = True


class PageMeta(BaseModel):
    total: int
    page: int
    page_size: int
