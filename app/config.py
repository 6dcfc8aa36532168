# app/config.py
"""Configuration management."""
import os

from dotenv import load_dotenv

# Load environment variables from a local .env file when present
load_dotenv()


class Config:
    """Application configuration read from the environment."""

    # Path of the JSON blob file; an empty value keeps everything in memory
    DATA_FILE = os.getenv("LIBRARY_DATA_FILE", "data/library.json")

    LOG_LEVEL = os.getenv("LIBRARY_LOG_LEVEL", "INFO")

    API_PREFIX = os.getenv("LIBRARY_API_PREFIX", "/api/catalog")

    @property
    def use_memory_store(self) -> bool:
        return not (self.DATA_FILE or "").strip()
