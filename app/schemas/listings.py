from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional
from datetime import datetime
from decimal import Decimal

from app.database import MAX_ID
from app.models.listings import ListingStatus
from app.schemas.categories import CategoryPathItem

# Sold is set by the checkout flow through the status endpoint, never on create/update
EditableStatus = Literal["Active", "Archived", "Draft"]


class ListingBase(BaseModel):
    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Listing title (1-255 characters)",
        examples=["Dell Inspiron 15 Laptop"]
    )
    price: Decimal = Field(
        ...,
        gt=0,
        max_digits=10,
        decimal_places=2,
        description="Listing price (must be greater than 0)",
        examples=[1499.99]
    )
    description: Optional[str] = Field(
        None,
        max_length=500,
        description="Short description (optional, max 500 characters)"
    )
    long_description: Optional[str] = Field(
        None,
        max_length=2000,
        description="Detailed description (optional, max 2000 characters)"
    )
    category_id: Optional[int] = Field(None, description="Category ID (optional)")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError('Title is required')
        return v.strip()


class ListingCreate(ListingBase):
    status: EditableStatus = "Draft"
    seller_id: int = Field(..., ge=1, le=MAX_ID, description="ID of the selling user")

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Dell Inspiron 15 Laptop",
                "price": 1499.99,
                "description": "16GB RAM, 512GB SSD",
                "category_id": 3,
                "status": "Active",
                "seller_id": 1
            }
        }


class ListingUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    description: Optional[str] = Field(None, max_length=500)
    long_description: Optional[str] = Field(None, max_length=2000)
    category_id: Optional[int] = None
    status: Optional[EditableStatus] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError('Title cannot be empty or whitespace only')
        return v.strip() if v else v


class ListingStatusUpdate(BaseModel):
    status: ListingStatus


class ListingResponse(ListingBase):
    id: int
    status: ListingStatus
    seller_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ListingDetail(ListingResponse):
    category_name: Optional[str] = None
    category_path: List[CategoryPathItem] = []


class ShortListing(BaseModel):
    """Listing card as shown on browse and search pages"""
    id: int
    title: str
    price: Decimal
    category: Optional[str] = None
    category_id: Optional[int] = None
    created_at: datetime
    seller_id: int


class ListingPage(BaseModel):
    listings: List[ShortListing]
    total_count: int
    page: int
    page_size: int
