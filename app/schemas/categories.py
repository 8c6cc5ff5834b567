from __future__ import annotations

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime


class CategoryBase(BaseModel):
    """Base schema for category data"""
    name: str = Field(..., min_length=1, max_length=100, description="Category name")
    parent_id: Optional[int] = Field(None, description="Parent category ID, empty for a top-level category")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError('Name is required')
        return v.strip()


class CategoryCreate(CategoryBase):
    """Schema for creating a new category"""
    pass


class CategoryUpdate(BaseModel):
    """
    Schema for updating an existing category.
    Omitted fields are left unchanged; an explicit null parent_id
    promotes the category to the top level.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    parent_id: Optional[int] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError('Name cannot be empty or whitespace only')
        return v.strip() if v else v


class CategoryResponse(CategoryBase):
    """Schema for category response"""
    id: int = Field(..., description="Category ID")
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CategoryPathItem(BaseModel):
    """One breadcrumb entry, ordered root to leaf"""
    id: int
    name: str


class CategoryTreeNode(BaseModel):
    id: int
    name: str
    parent_id: Optional[int] = None
    children: List[CategoryTreeNode] = []

    class Config:
        from_attributes = True
