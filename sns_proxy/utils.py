import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
}


def parse_log_level(value):
    # Nível desconhecido ou vazio -> INFO
    if not value:
        return logging.INFO
    return _LOG_LEVELS.get(str(value).strip().lower(), logging.INFO)


def configure_logging(level_name):
    level = parse_log_level(level_name)
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    # botocore é muito verboso em DEBUG
    logging.getLogger("botocore").setLevel(max(level, logging.INFO))
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))
    return level


def short(value, limit=200):
    text = str(value)
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
