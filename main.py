from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import Config, setup_logging
from app.database import Base, engine

# import models so they are registered on the metadata
import app.models.categories  # noqa: F401
import app.models.listings  # noqa: F401

from app.routes.categories import router as categories_router
from app.routes.listings import router as listings_router

setup_logging()

app = FastAPI(title="Marketplace Catalog")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],  # Allows all methods
    allow_headers=["*"],  # Allows all headers
)

# Create tables (after models are imported)
Base.metadata.create_all(bind=engine)

app.include_router(categories_router, prefix="/api/categories", tags=["categories"])
app.include_router(listings_router, prefix="/api/listings", tags=["listings"])

@app.get("/")
def read_root():
    return {"status": "ok"}
