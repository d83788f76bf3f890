"""
Runtime configuration.

Values come from the environment (a local .env file is loaded first) and can be overridden
by an optional YAML file. YAML keys are the lower-cased environment names without the
FAVRO_ prefix, e.g. `widget_ids`, `time_cf_id`, `timezone`.
"""
import logging
import os
from typing import Dict, List, Optional, Any

import yaml
from dotenv import load_dotenv

from errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://favro.com/api/v1"
DEFAULT_TIMEZONE = "Europe/Stockholm"
DEFAULT_MAX_PAGES_PER_WIDGET = 10
DEFAULT_TIMEOUT = 30.0
DEFAULT_DB_PATH = "timesheet.db"

REQUIRED = ("FAVRO_EMAIL", "FAVRO_TOKEN", "FAVRO_ORG_ID")


def _split_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return [s.strip() for s in str(value).split(',') if s.strip()]


class Settings:
    def __init__(
        self,
        email: Optional[str] = None,
        token: Optional[str] = None,
        organization_id: Optional[str] = None,
        time_cf_id: Optional[str] = None,
        widget_ids: Optional[List[str]] = None,
        max_pages_per_widget: int = DEFAULT_MAX_PAGES_PER_WIDGET,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = DEFAULT_BASE_URL,
        timezone: str = DEFAULT_TIMEZONE,
        db_path: str = DEFAULT_DB_PATH,
        log_level: str = "INFO",
    ):
        self.email = email
        self.token = token
        self.organization_id = organization_id
        self.time_cf_id = time_cf_id
        self.widget_ids = widget_ids or []
        self.max_pages_per_widget = int(max_pages_per_widget)
        self.timeout = float(timeout)
        self.base_url = base_url
        self.timezone = timezone
        self.db_path = db_path
        self.log_level = log_level

    def validate(self) -> List[str]:
        """Return the names of required settings that are missing."""
        values = {"FAVRO_EMAIL": self.email, "FAVRO_TOKEN": self.token, "FAVRO_ORG_ID": self.organization_id}
        return [name for name in REQUIRED if not values[name]]

    def require(self):
        missing = self.validate()
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")


def _load_yaml(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        raise ConfigurationError(f"Config file not found at: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        doc = yaml.safe_load(f) or {}
    if not isinstance(doc, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return doc


def load_settings(path: Optional[str] = None, env: Optional[Dict[str, str]] = None) -> Settings:
    """
    Build Settings from the environment and an optional YAML file.

    When env is None the process environment is used, after loading .env.
    """
    if env is None:
        load_dotenv()
        env = dict(os.environ)
    path = path or env.get("TIMESHEET_CONFIG")
    doc = _load_yaml(path) if path else {}

    def pick(yaml_key: str, env_key: str, default=None):
        if yaml_key in doc and doc[yaml_key] is not None:
            return doc[yaml_key]
        val = env.get(env_key)
        return val if val not in (None, "") else default

    settings = Settings(
        email=pick("email", "FAVRO_EMAIL"),
        token=pick("token", "FAVRO_TOKEN"),
        organization_id=pick("org_id", "FAVRO_ORG_ID"),
        time_cf_id=pick("time_cf_id", "FAVRO_TIME_CF_ID"),
        widget_ids=_split_list(pick("widget_ids", "FAVRO_WIDGET_IDS")),
        max_pages_per_widget=pick("max_pages_per_widget", "FAVRO_MAX_PAGES_PER_WIDGET", DEFAULT_MAX_PAGES_PER_WIDGET),
        timeout=pick("timeout", "FAVRO_TIMEOUT", DEFAULT_TIMEOUT),
        base_url=pick("base_url", "FAVRO_BASE_URL", DEFAULT_BASE_URL),
        timezone=pick("timezone", "TIMEZONE", DEFAULT_TIMEZONE),
        db_path=pick("db", "TIMESHEET_DB", DEFAULT_DB_PATH),
        log_level=pick("log_level", "LOG_LEVEL", "INFO"),
    )
    if not settings.time_cf_id:
        logger.warning("Missing FAVRO_TIME_CF_ID, timesheet reports will be refused until it is set")
    return settings
