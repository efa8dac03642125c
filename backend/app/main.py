"""
TVDB Episode Provider API
FastAPI application exposing episode metadata lookups
"""

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from app.models.api_models import ErrorResponse
from app.services.provider_service import reset_episode_provider

# Initialize FastAPI app
app = FastAPI(
    title="TVDB Episode Provider API",
    description="Episode metadata lookups backed by TheTVDB",
    version="1.0.0"
)


@app.on_event("shutdown")
async def shutdown_event():
    """Release the catalog client on shutdown"""
    reset_episode_provider()


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - health check"""
    return {
        "status": "ok",
        "message": "TVDB Episode Provider API",
        "version": "1.0.0"
    }


@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


# Custom exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            detail=str(exc),
            error_type=type(exc).__name__
        ).dict()
    )


# Import and include routers
from app.api.routes import episodes

app.include_router(episodes.router, prefix="/api", tags=["Episodes"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
