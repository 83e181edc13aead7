"""
FastAPI Application Entry Point.
"""
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .api import router, validation_error_handler
from .config import get_provider_name, settings


logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Create FastAPI app
app = FastAPI(
    title="I Got This Itinerary",
    description="Trip planner backend: AI extraction of booking details and geocoding",
    version="1.0.0"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router)
app.add_exception_handler(RequestValidationError, validation_error_handler)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "provider": get_provider_name() or "unconfigured"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "itinerary_app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
