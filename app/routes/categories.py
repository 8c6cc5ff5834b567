import logging
from typing import List
from fastapi import APIRouter, Depends, status, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.dependencies import require_admin
from app.core.exceptions import CatalogError, to_http_exception
from app.schemas.categories import (
    CategoryCreate,
    CategoryPathItem,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
)
from app.services.category_service import CategoryService

router = APIRouter(tags=["categories"])
logger = logging.getLogger(__name__)


@router.get(
    "",
    response_model=List[CategoryResponse],
    status_code=status.HTTP_200_OK,
    summary="Get all categories",
    description="Retrieve all listing categories from database"
)
async def get_all_categories(db: Session = Depends(get_db)):
    """
    Get all categories ordered by name.

    Returns:
        List[CategoryResponse]: List of all categories
    """
    try:
        logger.info("Fetching all categories")
        categories = CategoryService(db).list_categories()
        logger.info(f"Successfully retrieved {len(categories)} categories")
        return categories
    except Exception as e:
        logger.error(f"Error fetching categories: {str(e)}", exc_info=True)
        raise to_http_exception(e, "fetching categories")


@router.get(
    "/top-level",
    response_model=List[CategoryResponse],
    summary="Get top-level categories",
    description="Retrieve categories without a parent"
)
async def get_top_level_categories(db: Session = Depends(get_db)):
    try:
        return CategoryService(db).list_top_level()
    except Exception as e:
        logger.error(f"Error fetching top-level categories: {str(e)}", exc_info=True)
        raise to_http_exception(e, "fetching top-level categories")


@router.get(
    "/tree",
    response_model=List[CategoryTreeNode],
    summary="Get category tree",
    description="Retrieve the category hierarchy as nested nodes"
)
async def get_category_tree(db: Session = Depends(get_db)):
    try:
        return CategoryService(db).get_tree()
    except Exception as e:
        logger.error(f"Error building category tree: {str(e)}", exc_info=True)
        raise to_http_exception(e, "building the category tree")


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    status_code=status.HTTP_200_OK,
    summary="Get category by ID",
    description="Retrieve a specific category by its ID"
)
async def get_category(category_id: int, db: Session = Depends(get_db)):
    """
    Get a specific category by ID.

    Args:
        category_id: The ID of the category to retrieve

    Raises:
        HTTPException: If category not found
    """
    try:
        logger.info(f"Fetching category with ID: {category_id}")
        return CategoryService(db).get_category(category_id)
    except CatalogError as e:
        logger.warning(e.message)
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Unexpected error fetching category: {str(e)}", exc_info=True)
        raise to_http_exception(e, f"fetching category with ID {category_id}")


@router.get(
    "/{category_id}/path",
    response_model=List[CategoryPathItem],
    summary="Get category breadcrumb",
    description="Root-to-leaf path of a category; empty when the category does not exist"
)
async def get_category_path(category_id: int, db: Session = Depends(get_db)):
    try:
        return CategoryService(db).get_path(category_id)
    except Exception as e:
        logger.error(f"Error resolving path for category {category_id}: {str(e)}", exc_info=True)
        raise to_http_exception(e, f"resolving the path of category {category_id}")


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new category",
    description="Create a new listing category",
    dependencies=[Depends(require_admin)]
)
async def create_category(category_data: CategoryCreate, db: Session = Depends(get_db)):
    """
    Create a new category with validation and error handling.
    Requires admin access.

    Raises:
        HTTPException: If the name is taken or the parent does not exist
    """
    try:
        logger.info(f"Creating new category: {category_data.name}")
        return CategoryService(db).create_category(category_data)
    except HTTPException:
        raise
    except CatalogError as e:
        logger.warning(f"Category creation rejected: {e.message}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Unexpected error creating category: {str(e)}", exc_info=True)
        raise to_http_exception(e, "creating the category")


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    status_code=status.HTTP_200_OK,
    summary="Update category",
    description="Rename a category or move it under another parent",
    dependencies=[Depends(require_admin)]
)
async def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    db: Session = Depends(get_db)
):
    """
    Update a category. Moving a category under itself or one of its
    subcategories is rejected. Requires admin access.

    Args:
        category_id: The ID of the category to update
        category_data: Updated category data
    """
    try:
        logger.info(f"Updating category with ID: {category_id}")
        return CategoryService(db).update_category(category_id, category_data)
    except HTTPException:
        raise
    except CatalogError as e:
        logger.warning(f"Category update rejected for ID {category_id}: {e.message}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Unexpected error updating category: {str(e)}", exc_info=True)
        raise to_http_exception(e, f"updating category with ID {category_id}")


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete category",
    description="Delete a category that has no subcategories and no listings",
    dependencies=[Depends(require_admin)]
)
async def delete_category(category_id: int, db: Session = Depends(get_db)):
    """
    Delete a category with proper error handling.
    Requires admin access.

    Returns:
        dict: Success message
    """
    try:
        logger.info(f"Deleting category with ID: {category_id}")
        name = CategoryService(db).delete_category(category_id)
        return {
            "message": f"Category '{name}' deleted successfully",
            "id": category_id
        }
    except HTTPException:
        raise
    except CatalogError as e:
        logger.warning(f"Category deletion rejected for ID {category_id}: {e.message}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Unexpected error deleting category: {str(e)}", exc_info=True)
        raise to_http_exception(e, f"deleting category with ID {category_id}")
