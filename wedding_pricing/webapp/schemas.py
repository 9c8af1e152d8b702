"""
Pydantic models for request bodies in the web API.

Provides request validation with sensible defaults and constraints.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QuoteRequest(BaseModel):
    """
    Request body for a package quote.

    `products` are template products in content store shape:
    {"product": {...}, "quantity": 1, "isOptional": false}.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    products: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Template products to price",
    )
    adults: int = Field(50, ge=0, le=1000, description="Adult guests")
    children: int = Field(0, ge=0, le=1000, description="Child guests")
    nights: Optional[int] = Field(None, ge=1, le=60, description="Nights (default 3)")
    selected_date: Optional[str] = Field(None, alias="selectedDate")
    currencies: Optional[List[str]] = Field(
        None,
        description="Display currencies (default: all supported)",
    )

    @field_validator("currencies")
    @classmethod
    def normalize_currencies(cls, v):
        """Upper-case codes and drop blanks."""
        if v is None:
            return None
        codes = [code.strip().upper() for code in v if code and code.strip()]
        return codes or None


class ConvertRequest(BaseModel):
    """Request body for converting one IDR amount to several currencies."""

    model_config = ConfigDict(extra="ignore")

    amount: float = Field(..., allow_inf_nan=False, description="Amount in IDR")
    currencies: Optional[List[str]] = Field(
        None,
        description="Target currencies (default: USD, EUR, GBP, AUD)",
    )
