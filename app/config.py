# app/config.py
import os
from dataclasses import dataclass, field
from typing import Optional, List

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()


def _split_origins(raw: str) -> List[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass
class Settings:
    """Process-wide settings, read once when the app is created."""

    api_key: Optional[str] = None       # shared secret for x-api-key; None refuses every /api request
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            # an empty API_KEY counts as unset
            api_key=os.getenv("API_KEY") or None,
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "*")),
        )
