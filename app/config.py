"""
Environment-driven configuration for the DTP reporting API
Values come from the process environment (populated from .env in main.py)
"""

import os


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", "5000"))

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./dtp_reports.db")

# Security
SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-change-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", str(60 * 24 * 7)))  # 7 days
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

# Rate limiting
RATE_LIMIT = os.getenv("RATE_LIMIT", "100 per 15 minutes")
RATE_LIMIT_ENABLED = _env_bool("RATE_LIMIT_ENABLED", "true")

# Startup seeding
INIT_HOSPITALS = _env_bool("INIT_HOSPITALS")
SEED_ADMIN = _env_bool("SEED_ADMIN")
ADMIN_NAME = os.getenv("ADMIN_NAME", "Director Pharmaceutical Services")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "dps@dtp.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "change-me-admin")
ADMIN_HOSPITAL = os.getenv("ADMIN_HOSPITAL", "HQ")

# Image hosting (ImageKit)
IMAGEKIT_PRIVATE_KEY = os.getenv("IMAGEKIT_PRIVATE_KEY", "")
IMAGEKIT_UPLOAD_URL = os.getenv("IMAGEKIT_UPLOAD_URL", "https://upload.imagekit.io/api/v1/files/upload")
IMAGEKIT_API_URL = os.getenv("IMAGEKIT_API_URL", "https://api.imagekit.io/v1")

# Report photos
MAX_PHOTOS_PER_REPORT = 2
MAX_PHOTO_BYTES = int(os.getenv("MAX_PHOTO_BYTES", str(5 * 1024 * 1024)))  # 5MB


def is_development() -> bool:
    return ENVIRONMENT.lower() == "development"
