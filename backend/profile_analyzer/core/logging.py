import logging
import re

from profile_analyzer.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_CREDENTIALS_IN_URL = re.compile(r"//[^/@]*@")


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once for the whole process."""
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)

    # httpx logs every request at INFO; our own client already does that
    logging.getLogger("httpx").setLevel(logging.WARNING)


def mask_url_credentials(url: str) -> str:
    """Hide user:password in connection strings before logging them."""
    return _CREDENTIALS_IN_URL.sub("//***:***@", url)
