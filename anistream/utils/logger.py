import sys
import logging
from typing import Optional

from loguru import logger


# ===========================
# Log Contexts
# ===========================
DEFAULT_CONTEXT = "APP"

CONTEXTS = {
    "APP": {"color": "green", "icon": "🚀"},
    "API": {"color": "cyan", "icon": "🔗"},
    "PROVIDER": {"color": "blue", "icon": "🌐"},
    "CACHE": {"color": "white", "icon": "💾"},
    "DATABASE": {"color": "yellow", "icon": "🗄️"},
}

LEVEL_ICONS = {
    "DEBUG": "🔍",
    "INFO": "ℹ️ ",
    "WARNING": "⚠️ ",
    "ERROR": "❌",
}

EXTERNAL_LOGGERS = ("uvicorn.error", "uvicorn.access", "fastapi", "httpx", "databases")


# ===========================
# Log Formatters
# ===========================
def resolve_context(record) -> str:
    return record["extra"].get("context", DEFAULT_CONTEXT)


def format_console(record):
    context = resolve_context(record)
    style = CONTEXTS.get(context, {"color": "white", "icon": "📦"})
    level_icon = LEVEL_ICONS.get(record["level"].name, "")

    return (
        "<white>{time:YYYY-MM-DD}</white> "
        "<magenta>{time:HH:mm:ss}</magenta> | "
        f"<level>{level_icon} {{level: <8}}</level> | "
        f"<{style['color']}>{style['icon']} {context: <10}</{style['color']}> | "
        "<level>{message}</level>\n{exception}"
    )


def format_file(record):
    # Plain text, one line per record, so rotated files stay grep-able
    return f"{{time:YYYY-MM-DD HH:mm:ss.SSS}} | {{level: <8}} | {resolve_context(record): <10}| {{message}}\n{{exception}}"


# ===========================
# Sinks
# ===========================
def add_file_sink(path: str, level: str = "INFO", rotation: str = "10 MB", retention: str = "7 days") -> int:
    """Write logs to ``path`` as plain text, rotating and pruning old files.

    Returns the loguru handler id so callers can detach the sink.
    """
    return logger.add(
        path,
        level=level,
        format=format_file,
        colorize=False,
        rotation=rotation,
        retention=retention,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )


def silence_external_loggers():
    for name in EXTERNAL_LOGGERS:
        logging.getLogger(name).setLevel(logging.CRITICAL)
    logging.getLogger("uvicorn.access").disabled = True


def setup_logger(level: str = "INFO", log_file: Optional[str] = None, rotation: str = "10 MB", retention: str = "7 days"):
    logger.remove()

    logger.add(
        sys.stderr,
        level=level,
        format=format_console,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        add_file_sink(log_file, level, rotation, retention)

    silence_external_loggers()


# ===========================
# Logger Instances
# ===========================
def get_logger(context: str):
    return logger.bind(context=context)


app_logger = get_logger("APP")
api_logger = get_logger("API")
provider_logger = get_logger("PROVIDER")
cache_logger = get_logger("CACHE")
database_logger = get_logger("DATABASE")
