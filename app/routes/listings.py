import logging
from typing import Literal, Optional
from fastapi import APIRouter, Depends, status, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.exceptions import CatalogError, to_http_exception
from app.schemas.listings import (
    ListingCreate,
    ListingDetail,
    ListingPage,
    ListingResponse,
    ListingStatusUpdate,
    ListingUpdate,
)
from app.services.listing_filter import ListingQueryOptions
from app.services.listing_service import ListingService


router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=ListingPage)
def get_listings(
    category_id: Optional[int] = None,
    search: Optional[str] = None,
    sort_by: Literal["price", "date"] = "date",
    sort_order: Literal["asc", "desc"] = "desc",
    page: int = 1,
    page_size: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """
    Browse and search listings with pagination

    Query parameters:
    - category_id: Include listings of this category and all of its subcategories
    - search: Case-insensitive match in title and detailed description
    - sort_by: price or date
    - sort_order: asc or desc
    - page: Page number, values below 1 are treated as 1
    - page_size: Listings per page, clamped to the configured maximum
    """
    logger.info(
        f"Fetching listings (category_id={category_id}, search={search!r}, "
        f"sort={sort_by} {sort_order}, page={page}, page_size={page_size})"
    )
    try:
        options = ListingQueryOptions(
            category_id=category_id,
            search_term=search,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            page_size=page_size,
        )
        return ListingService(db).search(options)
    except Exception as e:
        logger.error(f"Error fetching listings: {str(e)}", exc_info=True)
        raise to_http_exception(e, "fetching listings")


@router.get("/{listing_id}", response_model=ListingDetail)
def get_listing(listing_id: int, db: Session = Depends(get_db)):
    """
    Get a single listing with its category name and category breadcrumb
    """
    logger.info(f"Fetching listing ID {listing_id}")
    try:
        return ListingService(db).get_listing_detail(listing_id)
    except CatalogError as e:
        logger.warning(e.message)
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching listing ID {listing_id}: {str(e)}", exc_info=True)
        raise to_http_exception(e, f"fetching listing with ID {listing_id}")


@router.post("", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
def create_listing(listing: ListingCreate, db: Session = Depends(get_db)):
    """
    Create a listing

    Validates required fields and returns meaningful error messages:
    - title: Required, 1-255 characters
    - price: Required, must be greater than 0, stored with 2 decimal places
    - category_id: Optional, must reference an existing category
    - status: Active, Archived or Draft
    """
    logger.info(f"Seller {listing.seller_id} creating listing '{listing.title}'")
    try:
        return ListingService(db).create_listing(listing)
    except HTTPException:
        raise
    except CatalogError as e:
        logger.warning(f"Listing creation rejected: {e.message}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error creating listing: {str(e)}", exc_info=True)
        raise to_http_exception(e, "creating the listing")


@router.put("/{listing_id}", response_model=ListingResponse)
def update_listing(
    listing_id: int,
    listing_data: ListingUpdate,
    db: Session = Depends(get_db)
):
    """
    Update a listing by ID
    All fields are optional - only provided fields will be updated
    """
    logger.info(f"Updating listing ID {listing_id}")
    try:
        return ListingService(db).update_listing(listing_id, listing_data)
    except HTTPException:
        raise
    except CatalogError as e:
        logger.warning(f"Listing update rejected for ID {listing_id}: {e.message}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error updating listing ID {listing_id}: {str(e)}", exc_info=True)
        raise to_http_exception(e, f"updating listing with ID {listing_id}")


@router.patch("/{listing_id}/status", response_model=ListingResponse)
def set_listing_status(
    listing_id: int,
    status_data: ListingStatusUpdate,
    db: Session = Depends(get_db)
):
    """
    Change the status of a listing; Sold listings disappear from browse results
    """
    logger.info(f"Setting status of listing ID {listing_id} to {status_data.status.value}")
    try:
        return ListingService(db).set_listing_status(listing_id, status_data.status)
    except CatalogError as e:
        logger.warning(e.message)
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error updating status of listing ID {listing_id}: {str(e)}", exc_info=True)
        raise to_http_exception(e, f"updating the status of listing {listing_id}")


@router.delete("/{listing_id}", status_code=status.HTTP_200_OK)
def delete_listing(listing_id: int, db: Session = Depends(get_db)):
    """
    Delete a listing by ID
    """
    logger.info(f"Deleting listing ID {listing_id}")
    try:
        listing_info = ListingService(db).delete_listing(listing_id)
        return {
            "status": "success",
            "message": "Listing deleted successfully",
            "deleted_listing": listing_info
        }
    except CatalogError as e:
        logger.warning(e.message)
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error deleting listing ID {listing_id}: {str(e)}", exc_info=True)
        raise to_http_exception(e, f"deleting listing with ID {listing_id}")
