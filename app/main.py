from fastapi import FastAPI
from .auth import auth_middleware
from .config import settings
from .database import create_tables, dispose_engine
from .logger import get_logger
from .routers import auth, upload

logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(title=settings.PROJECT_NAME)

# Require a session cookie outside the auth endpoints
app.middleware("http")(auth_middleware)

# Create database tables on startup
@app.on_event("startup")
async def startup_event():
    create_tables()
    logger.info(
        "%s started (table policy: %s, duplicate scope: %s)",
        settings.PROJECT_NAME, settings.TABLE_POLICY, settings.DUPLICATE_HASH_SCOPE,
    )

# Release database connections on shutdown
@app.on_event("shutdown")
async def shutdown_event():
    dispose_engine()

# Include API routers
app.include_router(auth.router, prefix=f"{settings.API_V1_STR}/auth", tags=["auth"])
app.include_router(upload.router, prefix=settings.API_V1_STR, tags=["upload"])

@app.get("/health")
async def health():
    return {"status": "ok"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
