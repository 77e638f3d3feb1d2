"""
DTP Reporting API
Drug therapy problem incident reporting for hospital pharmacists and administrators
"""

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi.errors import RateLimitExceeded
import uvicorn
from contextlib import asynccontextmanager
import logging
from datetime import datetime

from app import config
from app.database import engine, Base, SessionLocal
from app.models import user, hospital, report, activity_log  # noqa: F401  register tables
from app.routers import auth, reports, users, hospitals
from app.middleware.security_headers import SecurityHeadersMiddleware
from app.services.seed import seed_hospitals, seed_admin
from app.utils.error_handler import register_exception_handlers
from app.utils.rate_limit import limiter, rate_limit_exceeded_handler, GlobalRateLimitMiddleware

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api"

def initialize_data():
    """Create tables and run the optional seeders"""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    db = SessionLocal()
    try:
        if config.INIT_HOSPITALS:
            seed_hospitals(db)
        if config.SEED_ADMIN:
            seed_admin(db)
        elif config.is_development():
            logger.info("SEED_ADMIN is not enabled; skipping admin seeding.")
    finally:
        db.close()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    logger.info("Starting DTP Reporting API...")
    initialize_data()

    yield

    logger.info("Shutting down DTP Reporting API...")

# Create FastAPI app
app = FastAPI(
    title="DTP Reporting API",
    description="Drug therapy problem incident reporting, review and analytics",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_middleware(GlobalRateLimitMiddleware)

register_exception_handlers(app)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix=f"{API_PREFIX}/auth", tags=["authentication"])
app.include_router(reports.router, prefix=f"{API_PREFIX}/reports", tags=["reports"])
app.include_router(users.router, prefix=f"{API_PREFIX}/users", tags=["users"])
app.include_router(hospitals.router, prefix=f"{API_PREFIX}/hospitals", tags=["hospitals"])

@app.get(f"{API_PREFIX}/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "OK",
        "timestamp": datetime.utcnow().isoformat()
    }

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=config.PORT,
        reload=config.is_development(),
        log_level="info"
    )
