from fastapi import FastAPI

from moodplaces.core.config import settings
from moodplaces.routers import search, details, explanations, favorites

app = FastAPI(
    title=settings.project_name,
    version="1.0.0",
)

# Include routers
app.include_router(search.router, prefix=settings.api_v1_prefix)
app.include_router(details.router, prefix=settings.api_v1_prefix)
app.include_router(explanations.router, prefix=settings.api_v1_prefix)
app.include_router(favorites.router, prefix=settings.api_v1_prefix)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "Welcome to MoodPlaces API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
