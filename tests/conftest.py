from __future__ import annotations

import os

# must be set before the app modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_API_KEY"] = "test-admin-key"

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine
from app.models.categories import Category
from main import app


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def electronics_tree(db_session):
    """Electronics(1) -> Computers(2) -> Laptops(3), plus Books(4) as a second root."""
    db_session.add_all([
        Category(id=1, name="Electronics", parent_id=None),
        Category(id=2, name="Computers", parent_id=1),
        Category(id=3, name="Laptops", parent_id=2),
        Category(id=4, name="Books", parent_id=None),
    ])
    db_session.commit()
    return db_session
