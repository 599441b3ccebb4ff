"""
Main FastAPI application entry point.
Configures the application, middleware, and includes routers.
"""
from dotenv import load_dotenv

# Load environment variables from .env file first
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from .auth.router import router as auth_router
from .database import engine, Base
from .config import settings
from .auth import models as auth_models  # noqa: F401  registers tables
from .doctors import models as doctor_models  # noqa: F401
from .exceptions import register_exception_handlers
from .core.middleware import setup_middlewares

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Create database tables if they don't exist
Base.metadata.create_all(bind=engine)

logger.info("Starting MedConnect API...")

# Create FastAPI application
app = FastAPI(
    title="MedConnect API",
    description="Account and authentication API for the MedConnect patient/doctor platform",
    version="1.0.0"
)

# Register exception handlers
register_exception_handlers(app)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware
setup_middlewares(app)

# Include routers
app.include_router(auth_router)

# Root endpoint
@app.get("/")
def root():
    """
    Root endpoint for API health check.

    Returns:
        dict: Simple welcome message
    """
    return {"message": "Welcome to MedConnect API"}

# Health check endpoint
@app.get("/health")
async def health_check():
    return {"status": "healthy"}
