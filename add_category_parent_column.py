"""
Migration script to add parent_id column to categories table
Existing categories become top-level; the stored hierarchy is then checked for cycles
"""
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from app.database import SQLALCHEMY_DATABASE_URL
from app.core.exceptions import CorruptHierarchyError
from app.models import Category
from app.services.category_tree import CategoryTree
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def add_category_parent_column():
    """Add parent_id column with its self-referencing foreign key"""
    engine = create_engine(SQLALCHEMY_DATABASE_URL)
    SessionLocal = sessionmaker(bind=engine)
    db = SessionLocal()

    try:
        # Check if column already exists
        result = db.execute(text("""
            SELECT column_name
            FROM information_schema.columns
            WHERE table_name='categories' AND column_name='parent_id'
        """))

        if result.fetchone():
            logger.info("Column 'parent_id' already exists in categories table")
        else:
            logger.info("Adding parent_id column to categories table...")
            db.execute(text("""
                ALTER TABLE categories
                ADD COLUMN parent_id INTEGER NULL
            """))
            db.execute(text("""
                ALTER TABLE categories
                ADD CONSTRAINT categories_parent_id_fkey
                FOREIGN KEY (parent_id) REFERENCES categories (id)
            """))
            db.execute(text("""
                CREATE INDEX IF NOT EXISTS ix_categories_parent_id
                ON categories (parent_id)
            """))
            db.commit()
            logger.info("Column added successfully")

        verify_hierarchy(db)
        logger.info("Migration completed successfully!")

    except Exception as e:
        logger.error(f"Error during migration: {str(e)}")
        db.rollback()
        raise
    finally:
        db.close()

def verify_hierarchy(db):
    """Walk every category up to its root; fails on a parent cycle"""
    categories = db.query(Category).all()
    tree = CategoryTree(categories)
    logger.info(f"Verifying hierarchy of {len(tree)} categories...")
    try:
        for category in categories:
            tree.resolve_path(category.id)
    except CorruptHierarchyError as e:
        logger.error(f"Hierarchy check failed: {e.message}")
        raise
    logger.info("✓ Category hierarchy is acyclic")

if __name__ == "__main__":
    logger.info("Starting parent_id migration...")
    add_category_parent_column()
    logger.info("Migration script finished")
