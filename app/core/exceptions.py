"""
Domain errors raised by the catalog services and their translation
into the structured error details returned by the API.
"""
from typing import Optional

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, DatabaseError, OperationalError


class CatalogError(Exception):
    """Base class for user-actionable catalog errors"""
    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "catalog_error"
    suggestion: Optional[str] = None
    field: Optional[str] = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict:
        detail = {
            "error": type(self).__name__,
            "message": self.message,
            "type": self.error_type,
        }
        if self.field:
            detail["field"] = self.field
        if self.suggestion:
            detail["suggestion"] = self.suggestion
        return detail


class NotFoundError(CatalogError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "resource_not_found"


class SelfParentError(CatalogError):
    error_type = "self_parent"
    field = "parent_id"
    suggestion = "Choose a different parent category or leave it empty"

    def __init__(self, category_id: int):
        super().__init__("A category cannot be its own parent")
        self.category_id = category_id


class CircularReferenceError(CatalogError):
    error_type = "circular_reference"
    field = "parent_id"
    suggestion = "A category cannot be moved under one of its own subcategories"

    def __init__(self, category_id: int, parent_id: int):
        super().__init__(
            f"Category {parent_id} is a subcategory of category {category_id} "
            f"and cannot become its parent"
        )
        self.category_id = category_id
        self.parent_id = parent_id


class HasSubcategoriesError(CatalogError):
    status_code = status.HTTP_409_CONFLICT
    error_type = "has_subcategories"
    suggestion = "Move or delete the subcategories first"

    def __init__(self, category_id: int):
        super().__init__("Cannot delete a category with subcategories")
        self.category_id = category_id


class HasListingsError(CatalogError):
    status_code = status.HTTP_409_CONFLICT
    error_type = "has_listings"
    suggestion = "Reassign or delete the listings in this category first"

    def __init__(self, category_id: int):
        super().__init__("Cannot delete a category that has listings")
        self.category_id = category_id


class CorruptHierarchyError(CatalogError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type = "corrupt_hierarchy"
    suggestion = "Please contact an administrator to repair the category hierarchy"

    def __init__(self, category_id: int):
        super().__init__(f"The category hierarchy contains a cycle at category {category_id}")
        self.category_id = category_id


class DuplicateNameError(CatalogError):
    status_code = status.HTTP_409_CONFLICT
    error_type = "duplicate_constraint"
    field = "name"
    suggestion = "Please use a different category name"

    def __init__(self, message: str = "A category with this name already exists"):
        super().__init__(message)


def parse_exception_to_error_detail(e: Exception, context: str = "") -> dict:
    """
    Parse exception into a structured error detail dictionary.
    Unexpected errors get a generic message so internals are never exposed.
    """
    if isinstance(e, CatalogError):
        return e.to_detail()

    if isinstance(e, IntegrityError):
        error_msg = str(e.orig) if hasattr(e, 'orig') else str(e)

        if "unique constraint" in error_msg.lower() or "duplicate key" in error_msg.lower():
            return DuplicateNameError().to_detail()
        elif "not null" in error_msg.lower():
            return {
                "error": "MissingRequiredFieldError",
                "message": "Required fields are missing",
                "type": "missing_field",
                "suggestion": "Please ensure all required fields are provided"
            }
        elif "foreign key" in error_msg.lower():
            return {
                "error": "ForeignKeyConstraintError",
                "message": "Referenced data does not exist",
                "type": "foreign_key_violation",
                "suggestion": "Please ensure all referenced data exists"
            }

    elif isinstance(e, OperationalError):
        return {
            "error": "DatabaseConnectionError",
            "message": "Unable to connect to the database",
            "type": "database_connection",
            "suggestion": "Please try again later"
        }

    elif isinstance(e, DatabaseError):
        return {
            "error": "DatabaseError",
            "message": "A database error occurred",
            "type": "database_error",
            "suggestion": "Please verify your data and try again"
        }

    elif isinstance(e, ValidationError):
        return {
            "error": "ValidationError",
            "message": "Data validation failed",
            "type": "validation_error",
            "validation_details": e.errors(),
        }

    return {
        "error": "UnexpectedError",
        "message": f"An unexpected error occurred while {context}" if context else "An unexpected error occurred",
        "type": "internal_error",
        "suggestion": "Please try again or contact support"
    }


def status_code_for(e: Exception) -> int:
    if isinstance(e, CatalogError):
        return e.status_code
    if isinstance(e, IntegrityError):
        return status.HTTP_409_CONFLICT
    if isinstance(e, OperationalError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def to_http_exception(e: Exception, context: str = "") -> HTTPException:
    """Convert a service error into the HTTPException returned to the client"""
    return HTTPException(
        status_code=status_code_for(e),
        detail=parse_exception_to_error_detail(e, context)
    )
