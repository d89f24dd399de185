# backend/core/config.py

"""
Configuration settings for the Campaign Dispatch application.
"""

import os
from pydantic_settings import BaseSettings
from pydantic import validator
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Settings(BaseSettings):
    """Application settings class using Pydantic for validation"""

    # Application info
    APP_NAME: str = "CampaignDispatch"
    VERSION: str = "1.3.0"
    DEBUG: bool = os.getenv("DEBUG", "False") == "True"
    PRODUCTION: bool = os.getenv("PRODUCTION", "False") == "True"

    # Server settings
    PORT: int = int(os.getenv("PORT", "5050"))

    # Database settings (local assistant/campaign store)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./campaign_dispatch.db")

    # Remote voice-assistant provider
    VAPI_API_URL: str = os.getenv("VAPI_API_URL", "https://api.vapi.ai")
    VAPI_API_KEY: str = os.getenv("VAPI_API_KEY", "")
    PROVIDER_NAME: str = "vapi"

    # Workflow-automation endpoint
    WEBHOOK_BASE_URL: str = os.getenv(
        "WEBHOOK_BASE_URL",
        "https://primary-production-31de.up.railway.app/webhook"
    )
    WEBHOOK_CALL_PATH: str = os.getenv("WEBHOOK_CALL_PATH", "collowop")
    WEBHOOK_CREATE_ASSISTANT_PATH: str = os.getenv("WEBHOOK_CREATE_ASSISTANT_PATH", "createassistant")

    # Outbound request deadline
    FETCH_TIMEOUT_MS: int = int(os.getenv("FETCH_TIMEOUT_MS", "8000"))

    # Payload versioning
    CLIENT_VERSION: str = "1.3.0"
    PAYLOAD_SCHEMA_VERSION: int = 2

    # Call defaults
    DEFAULT_MODEL: str = os.getenv("DEFAULT_MODEL", "gpt-4o-turbo")
    DEFAULT_VOICE: str = os.getenv("DEFAULT_VOICE", "eleven_labs_gemma")

    # Known-good assistant used when nothing else resolves
    FALLBACK_ASSISTANT_ID: str = os.getenv(
        "FALLBACK_ASSISTANT_ID",
        "01646bac-c486-455b-b1f7-1c8e15ba4cbf"
    )
    FALLBACK_ASSISTANT_NAME: str = "Default Assistant"

    # Caller identity used by the provider's telephony routing
    CALLER_ID: str = os.getenv("CALLER_ID", "97141b30-c5bc-4234-babb-d38b79452e2a")

    # strict: untagged remote assistants are hidden from every owner
    # permissive: untagged remote assistants are visible to every owner
    REMOTE_OWNER_SCOPING: str = os.getenv("REMOTE_OWNER_SCOPING", "strict")

    # Owners whose session state is kept in memory at once
    SESSION_STATE_MAX_OWNERS: int = int(os.getenv("SESSION_STATE_MAX_OWNERS", "10000"))

    # CORS Settings
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    # Logging
    LOG_DIR: str = os.getenv("LOG_DIR", os.path.join(os.getcwd(), "logs"))
    LOG_TO_FILE: bool = os.getenv("LOG_TO_FILE", "False") == "True"

    @validator("VAPI_API_URL", "WEBHOOK_BASE_URL")
    def validate_base_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError("Base URLs must start with http:// or https://")
        return v.rstrip("/")

    @validator("WEBHOOK_CALL_PATH", "WEBHOOK_CREATE_ASSISTANT_PATH")
    def validate_webhook_path(cls, v):
        return v.strip("/")

    @validator("FETCH_TIMEOUT_MS")
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("FETCH_TIMEOUT_MS must be positive")
        return v

    @validator("REMOTE_OWNER_SCOPING")
    def validate_owner_scoping(cls, v):
        v = v.lower()
        if v not in ("strict", "permissive"):
            raise ValueError("REMOTE_OWNER_SCOPING must be 'strict' or 'permissive'")
        return v

    @property
    def call_webhook_url(self) -> str:
        return f"{self.WEBHOOK_BASE_URL}/{self.WEBHOOK_CALL_PATH}"

    @property
    def create_assistant_webhook_url(self) -> str:
        return f"{self.WEBHOOK_BASE_URL}/{self.WEBHOOK_CREATE_ASSISTANT_PATH}"

    class Config:
        """Pydantic settings configuration"""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

# Create a global settings instance
settings = Settings()
