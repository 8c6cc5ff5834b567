# package marker for app.models

# Import all models to ensure relationships are properly initialized
from app.models.categories import Category
from app.models.listings import Listing, ListingStatus

__all__ = [
    "Category",
    "Listing",
    "ListingStatus",
]
