import logging
import re
from pathlib import Path
from urllib.parse import quote

from shared.config import config


def setup_logging(service_name: str, log_level: str | None = None) -> logging.Logger:
    """Setup logging configuration for a service"""
    level = log_level or config.get("log_level", "INFO")
    logger = logging.getLogger(service_name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(f"%(asctime)s - {service_name} - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe storage"""
    invalid_chars = '<>:"/\\|?*'
    for char in invalid_chars:
        filename = filename.replace(char, "_")
    return filename


def slugify_title(title: str) -> str:
    """Replace every character outside [A-Za-z0-9] with an underscore."""
    return re.sub(r"[^A-Za-z0-9]", "_", title)


def derive_download_name(upload_name: str | None, suffix: str, fallback: str) -> str:
    """Build a download file name from the uploaded deck name.

    ``deck.pptx`` with suffix ``_script.txt`` becomes ``deck_script.txt``.
    Without an upload name the fallback is returned.
    """
    if not upload_name:
        return fallback
    stem = Path(sanitize_filename(Path(upload_name).name)).stem
    return f"{stem}{suffix}" if stem else fallback


def content_disposition(filename: str) -> str:
    """Build an attachment Content-Disposition header that survives non-ASCII names."""
    ascii_name = filename.encode("ascii", "ignore").decode("ascii").replace('"', "") or "download"
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"
