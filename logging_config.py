import logging
import sys
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo


class ZoneFormatter(logging.Formatter):
    """Stamps records in a fixed timezone instead of the host's local time."""

    def __init__(self, fmt=None, datefmt=None, tz: Optional[ZoneInfo] = None):
        super().__init__(fmt, datefmt)
        self.tz = tz

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=self.tz)
        return dt.strftime(datefmt or "%Y-%m-%d %H:%M:%S")


def setup_logging(level: str = "INFO", tz: Optional[str] = None):
    formatter = ZoneFormatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        "%H:%M:%S",
        tz=ZoneInfo(tz) if tz else None,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )
