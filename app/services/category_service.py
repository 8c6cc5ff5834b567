import logging
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import DuplicateNameError, NotFoundError
from app.database import MAX_ID
from app.models.categories import Category
from app.models.listings import Listing
from app.schemas.categories import CategoryCreate, CategoryUpdate
from app.services.category_tree import CategoryNode, CategoryTree

logger = logging.getLogger(__name__)


class CategoryService:
    """Category reads and admin mutations.

    Every mutation reads, validates and writes inside the session's
    single transaction. The category rows are read with FOR UPDATE so a
    concurrent edit cannot slip a cycle in between the check and the write.
    """

    def __init__(self, db: Session):
        self.db = db

    def load_tree(self, for_update: bool = False) -> CategoryTree:
        query = self.db.query(Category)
        if for_update:
            query = query.with_for_update()
        return CategoryTree(query.all())

    def list_categories(self) -> List[Category]:
        return self.db.query(Category).order_by(Category.name, Category.id).all()

    def list_top_level(self) -> List[Category]:
        return self.load_tree().top_level()

    def get_category(self, category_id: int) -> Category:
        category = None
        if 0 < category_id <= MAX_ID:
            category = self.db.query(Category).filter(Category.id == category_id).first()
        if not category:
            raise NotFoundError(f"Category with ID {category_id} not found")
        return category

    def get_tree(self) -> List[CategoryNode]:
        return self.load_tree().build_forest()

    def get_path(self, category_id: int) -> List[Dict[str, object]]:
        return self.load_tree().resolve_path(category_id)

    def create_category(self, data: CategoryCreate) -> Category:
        try:
            tree = self.load_tree(for_update=True)
            name = data.name.strip()
            self._ensure_name_available(name)
            # 0 is not a valid id; treat it like "no parent"
            parent_id = data.parent_id or None
            self._ensure_parent_exists(tree, parent_id)

            category = Category(name=name, parent_id=parent_id)
            self.db.add(category)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error creating category '{data.name}': {e.orig}")
            raise DuplicateNameError() from e
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(category)
        logger.info(f"Created category: {category.name} (ID: {category.id})")
        return category

    def update_category(self, category_id: int, data: CategoryUpdate) -> Category:
        try:
            tree = self.load_tree(for_update=True)
            category = self.get_category(category_id)

            if data.name and data.name != category.name:
                self._ensure_name_available(data.name, exclude_id=category_id)

            if "parent_id" in data.model_fields_set:
                parent_id = data.parent_id or None
                self._ensure_parent_exists(tree, parent_id)
                tree.validate_no_cycle(category_id, parent_id)
                category.parent_id = parent_id

            if data.name:
                category.name = data.name
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error updating category {category_id}: {e.orig}")
            raise DuplicateNameError() from e
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(category)
        logger.info(f"Updated category: {category.name} (ID: {category.id})")
        return category

    def delete_category(self, category_id: int) -> str:
        """Delete a category and return its name."""
        try:
            tree = self.load_tree(for_update=True)
            category = self.get_category(category_id)
            name = category.name

            tree.validate_deletable(category_id, self._listing_counts(category_id))

            self.db.delete(category)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Deleted category: {name} (ID: {category_id})")
        return name

    def _listing_counts(self, category_id: int) -> Dict[int, int]:
        count = (
            self.db.query(func.count(Listing.id))
            .filter(Listing.category_id == category_id)
            .scalar()
        )
        return {category_id: count or 0}

    def _ensure_name_available(self, name: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(Category).filter(func.lower(Category.name) == name.lower())
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        if query.first():
            raise DuplicateNameError()

    @staticmethod
    def _ensure_parent_exists(tree: CategoryTree, parent_id: Optional[int]) -> None:
        if parent_id is not None and parent_id not in tree:
            raise NotFoundError(f"Parent category with ID {parent_id} not found")
