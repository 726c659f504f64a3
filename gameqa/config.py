"""
Configuration settings for GameQA
"""
import re
from pydantic_settings import BaseSettings
from pathlib import Path

from .utils.errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "GameQA"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Paths
    OUTPUT_DIR: Path = Path("./output")

    # Ollama settings
    OLLAMA_HOST: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "llama3.2"
    LLM_ENABLED: bool = True
    LLM_TEMPERATURE: float = 0.3
    LLM_MAX_TOKENS: int = 1000

    # Browser settings
    BROWSER_HEADLESS: bool = True
    BROWSER_TIMEOUT: int = 30000  # ms
    SCREENSHOT_RESOLUTION: str = "1920x1080"

    # Test settings
    DEFAULT_TIMEOUT: float = 300  # seconds
    MAX_RETRIES: int = 3
    INTERACTION_DELAY_MS: int = 2000

    class Config:
        env_file = ".env"
        extra = "allow"


settings = Settings()


def parse_resolution(resolution: str) -> dict:
    """
    Parse a "WIDTHxHEIGHT" string into a viewport dict.

    Args:
        resolution: Resolution string such as "1920x1080"

    Returns:
        Dictionary with width and height
    """
    match = re.fullmatch(r"\s*(\d+)\s*[xX]\s*(\d+)\s*", resolution or "")
    if not match:
        raise ConfigurationError(f"Invalid screenshot resolution: {resolution!r}")
    return {"width": int(match.group(1)), "height": int(match.group(2))}


def validate_settings(config: Settings = None) -> Settings:
    """
    Check that the settings can drive a test session.

    Raises:
        ConfigurationError: If a required value is missing or malformed
    """
    config = config or settings

    if config.LLM_ENABLED and not config.OLLAMA_MODEL.strip():
        raise ConfigurationError("OLLAMA_MODEL is required when LLM_ENABLED is true")
    if config.DEFAULT_TIMEOUT <= 0:
        raise ConfigurationError("DEFAULT_TIMEOUT must be positive")
    if config.MAX_RETRIES < 0:
        raise ConfigurationError("MAX_RETRIES must not be negative")
    parse_resolution(config.SCREENSHOT_RESOLUTION)

    return config
