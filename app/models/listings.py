import enum

from sqlalchemy import Column, Integer, String, DateTime, Numeric, Text, Enum, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class ListingStatus(str, enum.Enum):
    ACTIVE = "Active"
    ARCHIVED = "Archived"
    DRAFT = "Draft"
    SOLD = "Sold"


# Statuses hidden from browse and search results
EXCLUDED_STATUSES = (ListingStatus.SOLD,)


class Listing(Base):
    __tablename__ = "listings"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(255), nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False)
    status = Column(
        Enum(ListingStatus, name="listing_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ListingStatus.DRAFT,
    )
    description = Column(String(500), nullable=True)
    long_description = Column(Text, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    seller_id = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    category = relationship("Category", back_populates="listings")
