"""Configuration loading and validation for tripreel."""

import os
import logging
from typing import Dict, List
from pathlib import Path
from dotenv import load_dotenv
from rich.logging import RichHandler

# Get the project root directory (parent of src)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Load environment variables from .env file in project root
load_dotenv(PROJECT_ROOT / '.env')


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def load_config() -> Dict:
    """Load configuration from environment variables."""
    config = {
        # Required API keys
        'gemini_api_key': os.getenv('GEMINI_API_KEY'),
        'youtube_api_key': os.getenv('YOUTUBE_API_KEY'),

        # Model configuration
        'gemini_model': os.getenv('GEMINI_MODEL', 'gemini-2.0-flash-001'),

        # Search settings
        'max_results_per_phrase': int(os.getenv('MAX_RESULTS_PER_PHRASE', '15')),
        'fallback_query': os.getenv('FALLBACK_QUERY', 'Goa travel'),
        'location_boost': _env_flag('LOCATION_BOOST', True),

        # Itinerary enrichment
        'include_transcripts': _env_flag('INCLUDE_TRANSCRIPTS', True),
        'include_thumbnails': _env_flag('INCLUDE_THUMBNAILS', True),
        'caption_languages': [
            lang.strip() for lang in os.getenv('CAPTION_LANGUAGES', 'en').split(',') if lang.strip()
        ],

        # Applies to every outbound request
        'request_timeout_seconds': float(os.getenv('REQUEST_TIMEOUT_SECONDS', '30')),

        # Web server
        'host': os.getenv('HOST', '127.0.0.1'),
        'port': int(os.getenv('PORT', '8000')),
        'log_level': os.getenv('LOG_LEVEL', 'INFO'),

        # In-memory sessions, one per page load
        'max_sessions': int(os.getenv('MAX_SESSIONS', '200')),
        'session_ttl_seconds': float(os.getenv('SESSION_TTL_SECONDS', '3600')),
    }

    return config


def validate_config(config: Dict) -> List[str]:
    """Validate configuration and return list of errors."""
    errors = []

    # Check required API keys
    if not config.get('gemini_api_key'):
        errors.append("GEMINI_API_KEY is required")

    if not config.get('youtube_api_key'):
        errors.append("YOUTUBE_API_KEY is required")

    if config.get('max_results_per_phrase', 15) <= 0:
        errors.append("MAX_RESULTS_PER_PHRASE must be positive")

    if config.get('request_timeout_seconds', 30) <= 0:
        errors.append("REQUEST_TIMEOUT_SECONDS must be positive")

    if config.get('max_sessions', 200) <= 0:
        errors.append("MAX_SESSIONS must be positive")

    if not str(config.get('fallback_query', 'Goa travel')).strip():
        errors.append("FALLBACK_QUERY must not be empty")

    return errors


def setup_logging(log_level: str = "INFO") -> None:
    """Set up logging configuration with Rich for console output."""
    # Clear any existing handlers
    logging.root.handlers.clear()

    rich_handler = RichHandler(
        show_time=True,
        show_level=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False  # Disable markup to avoid conflicts
    )

    # File handler for plain text logging (always in src directory)
    log_file = PROJECT_ROOT / 'src' / 'tripreel.log'
    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))

    # Configure root logger
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        handlers=[rich_handler, file_handler],
        format="%(message)s"
    )

    # Suppress noisy third-party loggers
    noisy_loggers = [
        'httpx',
        'google_genai',
        'google_genai.models',
        'googleapiclient.discovery',
        'googleapiclient.discovery_cache',
        'urllib3.connectionpool',
        'yt_dlp',
        'uvicorn.access',
    ]

    for logger_name in noisy_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
