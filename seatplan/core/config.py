"""
Configuration settings for the application
"""

import os
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env")
    
    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./seating.db")
    USE_FIREBASE: bool = os.getenv("USE_FIREBASE", "false").lower() in ("1", "true", "yes")
    FIREBASE_CREDENTIALS_JSON: str | None = os.getenv("FIREBASE_CREDENTIALS_JSON")
    FIREBASE_CREDENTIALS_FILE: str | None = os.getenv("FIREBASE_CREDENTIALS_FILE")
    FIREBASE_CREDENTIALS_B64: str | None = os.getenv("FIREBASE_CREDENTIALS_B64")
    
    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5000",
        "http://localhost:8000",
    ]
    
    # Auto-save
    AUTOSAVE_QUIET_PERIOD: float = 2.0  # seconds after the last edit
    
    # Map view state (zoom / pan), kept outside the arrangement
    VIEW_STATE_DELAY: float = 0.5
    VIEW_STATE_PATH: str = os.getenv("VIEW_STATE_PATH", "./.seating_view_state.json")
    
    # Seating policy
    ALLOW_PENDING_ASSIGNMENT: bool = True
    DEFAULT_TABLE_CAPACITY: int = 8
    REGULAR_TABLE_CAPACITY: int = 12
    KNIGHT_TABLE_CAPACITY: int = 24
    DEFAULT_KNIGHT_TABLES: int = 4

settings = Settings()
