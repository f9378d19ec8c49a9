"""
UI Feedback Server Configuration
================================

PURPOSE:
    Pydantic-Settings based configuration for the feedback server.
    All settings can be overridden via environment variables (UI_FEEDBACK_ prefix).
"""

import logging
import re
from typing import List, Optional

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Process-wide settings shared by the HTTP and MCP boundaries."""

    app_name: str = "ui-feedback-mcp"
    app_version: str = "0.1.0"
    debug: bool = False

    # HTTP listener, loopback only by default
    http_host: str = "127.0.0.1"
    http_port: int = 4747
    max_body_size: int = 1024 * 1024  # 1MB

    # Intake limits
    max_batch_size: int = 100
    max_comment_length: int = 10000

    # CORS: '*' matches any run of characters (e.g. any port)
    allowed_origins: List[str] = ["http://localhost:*", "http://127.0.0.1:*"]

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[str] = None  # Rotating JSON file logs when set

    class Config:
        env_file = ".env"
        env_prefix = "UI_FEEDBACK_"

    def origin_regex(self) -> str:
        """Build a single anchored regex from the allowed origin patterns."""
        parts = [
            re.escape(pattern).replace(r"\*", ".*")
            for pattern in self.allowed_origins
        ]
        return "^(?:" + "|".join(parts) + ")$"


settings = Settings()
