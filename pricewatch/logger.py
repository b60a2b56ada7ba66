# pricewatch/logger.py
import logging
import re

LOGGER_NAME = "pricewatch"


def setup_logger(debug=False):
    """Configure logger with optional debug mode"""
    level = logging.DEBUG if debug else logging.INFO
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    logging.basicConfig(
        level=level,
        format=log_format,
        handlers=[
            logging.StreamHandler()
        ],
        force=True,
    )
    # httpx logs every request line (with query strings) at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level)
    return root


_KEY_VALUE_PATTERN = re.compile(
    r'(?i)\b(token|apikey|api_key|password|secret|key)=([^&\s]+)'
)
_BEARER_PATTERN = re.compile(r'(?i)bearer\s+[A-Za-z0-9._\-]+')


def redact_sensitive(text: str) -> str:
    if not text:
        return text

    # Standalone tokens (API keys, JWTs)
    if 20 <= len(text) < 400 and re.fullmatch(r'[A-Za-z0-9._\-]+', text):
        return f"{text[:4]}...{text[-4:]}"

    text = _KEY_VALUE_PATTERN.sub(lambda m: f"{m.group(1)}=REDACTED", text)
    text = _BEARER_PATTERN.sub("Bearer REDACTED", text)
    return text


logger = logging.getLogger(LOGGER_NAME)
