"""Client configuration with environment variable loading.

Pydantic-based configuration for the backend client and the chat panes.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

# 10MB upload limit enforced before any request is sent
MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class ClientConfig(BaseModel):
    """Configuration for the document-chat client.

    Attributes:
        api_base_url: Base URL of the document-chat backend.
        request_timeout: Timeout in seconds for a single backend request.
        history_limit: Maximum number of persisted messages loaded per document.
        max_upload_bytes: Largest file accepted by the upload pre-check.
    """

    api_base_url: str = Field(
        default_factory=lambda: os.getenv("API_BASE_URL", "http://localhost:8000"),
        description="Backend base URL",
    )
    request_timeout: float = Field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT", "120.0")),
        gt=0.0,
        description="Per-request timeout in seconds",
    )
    history_limit: int = Field(
        default_factory=lambda: int(os.getenv("HISTORY_LIMIT", "50")),
        ge=1,
        le=1000,
        description="Messages loaded when a document chat is opened",
    )
    max_upload_bytes: int = Field(
        default=MAX_UPLOAD_BYTES,
        ge=1,
        description="Upload size limit in bytes",
    )

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("API_BASE_URL must start with http:// or https://")
        return v


def get_client_config() -> ClientConfig:
    """Create client configuration from environment.

    Returns:
        Configured ClientConfig instance.

    Raises:
        ValueError: If an environment value is invalid.
    """
    return ClientConfig()
