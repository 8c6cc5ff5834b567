"""
Turns a browse/search request into one listings query: the category
filter is expanded to the whole subtree, Sold listings are hidden and
results are ordered deterministically before pagination.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.config import Config
from app.database import MAX_ID
from app.models.categories import Category
from app.models.listings import EXCLUDED_STATUSES, Listing
from app.schemas.listings import ListingPage, ShortListing
from app.services.category_tree import CategoryTree

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "price": Listing.price,
    "date": Listing.created_at,
}

# keeps (page - 1) * page_size below the largest bindable offset
MAX_PAGE = MAX_ID // Config.MAX_PAGE_SIZE


@dataclass
class ListingQueryOptions:
    category_id: Optional[int] = None
    search_term: Optional[str] = None
    sort_by: str = "date"
    sort_order: str = "desc"
    page: int = 1
    page_size: Optional[int] = None

    def normalized(self) -> "ListingQueryOptions":
        """Clamp paging values instead of rejecting them."""
        page_size = Config.DEFAULT_PAGE_SIZE if self.page_size is None else self.page_size
        search_term = self.search_term.strip() if self.search_term else None
        return ListingQueryOptions(
            category_id=self.category_id,
            search_term=search_term or None,
            sort_by=self.sort_by if self.sort_by in SORT_COLUMNS else "date",
            sort_order="asc" if self.sort_order == "asc" else "desc",
            page=min(max(1, self.page or 1), MAX_PAGE),
            page_size=min(max(1, page_size), Config.MAX_PAGE_SIZE),
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_listing_query(db: Session, options: ListingQueryOptions) -> ListingPage:
    options = options.normalized()
    query = db.query(Listing).filter(Listing.status.notin_(EXCLUDED_STATUSES))

    if options.category_id is not None:
        tree = CategoryTree(db.query(Category).all())
        if options.category_id not in tree:
            return ListingPage(listings=[], total_count=0, page=options.page, page_size=options.page_size)
        category_ids = tree.descendants_inclusive(options.category_id)
        logger.debug(f"Category {options.category_id} expands to {sorted(category_ids)}")
        query = query.filter(Listing.category_id.in_(sorted(category_ids)))

    if options.search_term:
        pattern = f"%{_escape_like(options.search_term)}%"
        query = query.filter(
            or_(
                Listing.title.ilike(pattern, escape="\\"),
                Listing.long_description.ilike(pattern, escape="\\"),
            )
        )

    total_count = query.count()

    sort_column = SORT_COLUMNS[options.sort_by]
    primary = sort_column.asc() if options.sort_order == "asc" else sort_column.desc()
    rows = (
        query.order_by(primary, Listing.id.asc())
        .offset(options.offset)
        .limit(options.page_size)
        .all()
    )

    listings = [
        ShortListing(
            id=row.id,
            title=row.title,
            price=row.price,
            category=row.category.name if row.category else None,
            category_id=row.category_id,
            created_at=row.created_at,
            seller_id=row.seller_id,
        )
        for row in rows
    ]
    return ListingPage(
        listings=listings,
        total_count=total_count,
        page=options.page,
        page_size=options.page_size,
    )
