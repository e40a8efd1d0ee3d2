import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Plaintext .env at the project root holds deployment overrides
ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')


def get_config():
    return Config(
        countdown_output_dir=os.environ.get("COUNTDOWN_OUTPUT_DIR", tempfile.gettempdir()),
        countdown_timezone=os.environ.get("COUNTDOWN_TIMEZONE", "US/Eastern"),
        countdown_font_path=os.environ.get("COUNTDOWN_FONT_PATH"),
        log_dir=os.environ.get("LOG_DIR", "logs"),
        web_server_debug_mode_on=str(os.environ.get("WEB_SERVER_DEBUG_MODE_ON", "False")).lower() == "true",
        web_server_port=int(os.environ.get("WEB_SERVER_PORT", "4000")),
    )


@dataclass
class Config:
    """Configuration settings for the application."""
    countdown_output_dir: str = tempfile.gettempdir()
    countdown_timezone: str = "US/Eastern"
    countdown_font_path: Optional[str] = None
    log_dir: str = "logs"
    web_server_debug_mode_on: bool = False
    web_server_port: int = 4000
