"""Configuration management for the weekly plan service."""
import os
from typing import Final, Optional
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Generation backend
OPENAI_API_KEY: Final[Optional[str]] = os.getenv('OPENAI_API_KEY') or None
OPENAI_MODEL: Final[str] = os.getenv('OPENAI_MODEL', 'gpt-4o-mini')
OPENAI_TIMEOUT: Final[float] = float(os.getenv('OPENAI_TIMEOUT', '60'))
OPENAI_MAX_RETRIES: Final[int] = int(os.getenv('OPENAI_MAX_RETRIES', '1'))

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'DEBUG' if DEBUG else 'INFO').upper()

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('WEEKPLAN_DATA_DIR', str(BASE_DIR / 'data'))).resolve()
