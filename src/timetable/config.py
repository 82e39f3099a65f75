"""Timetable extraction settings loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings

from src.timetable.constants import PAGE_TIMEOUT, SHEET_TIMEOUT


class ScheduleConfig(BaseSettings):
    """Timetable extraction settings loaded from environment variables.

    Every field can be set through a ``TIMETABLE_``-prefixed variable, e.g.
    ``TIMETABLE_SECURE_LINKS=false``. For local development, create a .env
    file in the project root.
    """

    # Network
    page_timeout: float = Field(
        default=PAGE_TIMEOUT,
        description="Seconds to wait for the schedule page",
    )
    sheet_timeout: float = Field(
        default=SHEET_TIMEOUT,
        description="Seconds to wait for the spreadsheet download",
    )
    user_agent: str = Field(
        default="timetable-scraper/1.0",
        description="User-Agent header sent with every request",
    )

    # Link filtering
    secure_links: bool = Field(
        default=True,
        description=(
            "Only accept spreadsheet links on the page's own host whose text "
            "mentions 'download' (rejects links posted in page comments)"
        ),
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "TIMETABLE_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: ScheduleConfig | None = None


def get_config() -> ScheduleConfig:
    """Get the timetable configuration singleton.

    Returns:
        ScheduleConfig: Timetable configuration instance
    """
    global _config
    if _config is None:
        _config = ScheduleConfig()
    return _config
