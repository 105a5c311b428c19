"""
Base schemas for all models.
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow attribute objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class ScanStats(BaseSchema):
    """Counters shared by every catalog scan response."""
    total_products_scanned: int = 0
    total_variants_scanned: int = 0
    error: Optional[str] = None
