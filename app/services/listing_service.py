import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.database import MAX_ID
from app.models.categories import Category
from app.models.listings import Listing, ListingStatus
from app.schemas.categories import CategoryPathItem
from app.schemas.listings import ListingCreate, ListingDetail, ListingPage, ListingUpdate
from app.services.category_tree import CategoryTree
from app.services.listing_filter import ListingQueryOptions, build_listing_query

logger = logging.getLogger(__name__)


class ListingService:
    def __init__(self, db: Session):
        self.db = db

    def search(self, options: ListingQueryOptions) -> ListingPage:
        return build_listing_query(self.db, options)

    def get_listing(self, listing_id: int) -> Listing:
        listing = None
        if 0 < listing_id <= MAX_ID:
            listing = self.db.query(Listing).filter(Listing.id == listing_id).first()
        if not listing:
            raise NotFoundError(f"Listing with ID {listing_id} not found")
        return listing

    def get_listing_detail(self, listing_id: int) -> ListingDetail:
        """Listing with its category name and breadcrumb"""
        listing = self.get_listing(listing_id)
        detail = ListingDetail.model_validate(listing)
        if listing.category_id is not None:
            tree = CategoryTree(self.db.query(Category).all())
            detail.category_path = [CategoryPathItem(**item) for item in tree.resolve_path(listing.category_id)]
            detail.category_name = listing.category.name if listing.category else None
        return detail

    def create_listing(self, data: ListingCreate) -> Listing:
        self._ensure_category_exists(data.category_id)
        listing = Listing(
            title=data.title,
            price=data.price,
            description=data.description,
            long_description=data.long_description,
            category_id=data.category_id,
            status=ListingStatus(data.status),
            seller_id=data.seller_id,
        )
        try:
            self.db.add(listing)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(listing)
        logger.info(f"Created listing '{listing.title}' (ID: {listing.id}) for seller {listing.seller_id}")
        return listing

    def update_listing(self, listing_id: int, data: ListingUpdate) -> Listing:
        listing = self.get_listing(listing_id)
        changes = data.model_dump(exclude_unset=True)

        if "category_id" in changes:
            self._ensure_category_exists(changes["category_id"])
        if changes.get("status") is not None:
            changes["status"] = ListingStatus(changes["status"])

        for field, value in changes.items():
            if field in ("title", "price", "status") and value is None:
                continue
            setattr(listing, field, value)

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(listing)
        logger.info(f"Updated listing ID {listing_id}: {sorted(changes)}")
        return listing

    def set_listing_status(self, listing_id: int, status: ListingStatus) -> Listing:
        listing = self.get_listing(listing_id)
        listing.status = status
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(listing)
        logger.info(f"Listing ID {listing_id} status set to {status.value}")
        return listing

    def delete_listing(self, listing_id: int) -> dict:
        listing = self.get_listing(listing_id)
        listing_info = {"id": listing.id, "title": listing.title}
        try:
            self.db.delete(listing)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Listing ID {listing_id} deleted")
        return listing_info

    def _ensure_category_exists(self, category_id: Optional[int]) -> None:
        if category_id is None:
            return
        exists = None
        if 0 < category_id <= MAX_ID:
            exists = self.db.query(Category.id).filter(Category.id == category_id).first()
        if not exists:
            raise NotFoundError(f"Category with ID {category_id} not found")
