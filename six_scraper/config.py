import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://six.itb.ac.id"


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 15.0
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"


def load_settings() -> Settings:
    """
    Reads the settings from the environment, a local .env file is picked up first.
    Bad numbers fail loudly here instead of on the first request.
    """
    load_dotenv()

    try:
        timeout = float(os.getenv("SIX_TIMEOUT", "15"))
        port = int(os.getenv("PORT", "8080"))
    except ValueError as error:
        raise ValueError(f"SIX_TIMEOUT and PORT must be numeric: {error}") from error

    return Settings(
        # Trailing slash would double up when joined with the portal paths
        base_url=os.getenv("SIX_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        timeout=timeout,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
