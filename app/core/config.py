"""
Application Configuration Module

This module defines all configuration settings for the marketplace API.
Settings are loaded from environment variables (via .env file) using Pydantic.
"""
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide configuration settings.
    
    All settings can be overridden via environment variables.
    The .env file is automatically loaded if present.
    """
    # === Application Metadata ===
    PROJECT_NAME: str = "Marketplace API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"  # API version prefix for all routes
    LOG_LEVEL: str = "INFO"

    # === Document Store Configuration ===
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "marketplace"
    # Transactions need a replica set; a standalone server rejects them
    MONGODB_USE_TRANSACTIONS: bool = False

    # === Security Configuration ===
    # IMPORTANT: Change SECRET_KEY in production to a strong random value
    SECRET_KEY: str = "your-super-secret-key-change-me"  # Shared secret for verifying identity tokens
    ALGORITHM: str = "HS256"  # JWT signing algorithm
    AUTH_COOKIE_NAME: str = "auth_token"
    # Accept the user-email / user-role header pair when no token is sent
    TRUST_IDENTITY_HEADERS: bool = True

    # === File Uploads ===
    UPLOADS_DIR: Path = Path("./uploads")
    UPLOADS_URL_PREFIX: str = "/uploads"

    # === CORS ===
    BACKEND_CORS_ORIGINS: List[str] = ["*"]  # In production, specify actual origins

    # Pydantic configuration
    model_config = SettingsConfigDict(
        env_file=".env",        # Load environment variables from .env file
        case_sensitive=True,    # Environment variable names must match case
        extra="ignore"          # Ignore extra environment variables not defined here
    )

# Create a single global settings instance
# This is imported throughout the application for configuration access
settings = Settings()
