"""
Loguru setup for the booking dialogue service.

Sinks are chosen per environment from ``ENVIRONMENT_PRESETS``. Audit
helpers bind a ``category`` to every record so that booking and
conversation events can be filtered into their own files.
"""
import sys
from pathlib import Path
from typing import Any, Dict, Optional
from loguru import logger

LOG_FORMATS: Dict[str, str] = {
    "simple": "<level>{level: <8}</level> | {message}",
    "detailed": (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
        "{message}"
    ),
    "json": "{message}",
}

ENVIRONMENT_PRESETS: Dict[str, Dict[str, Any]] = {
    "production": {"log_level": "INFO", "log_to_file": True, "format_type": "json",
                   "rotation": "100 MB", "retention": "90 days"},
    "test": {"log_level": "WARNING", "log_to_file": False, "format_type": "simple"},
    "development": {"log_level": "DEBUG", "log_to_file": True, "format_type": "detailed",
                    "rotation": "50 MB", "retention": "7 days"},
}

# Category -> (file prefix, retention); records without a category only reach the main sinks
AUDIT_FILES = {
    "BOOKING": ("bookings", "1 year"),
    "CONVERSATION": ("conversations", "30 days"),
}


def _only(category: str):
    return lambda record: record["extra"].get("category") == category


def configure_logging(
    log_level: str = "INFO",
    log_to_file: bool = True,
    log_dir: str = "logs",
    rotation: str = "100 MB",
    retention: str = "30 days",
    format_type: str = "detailed"
) -> None:
    """
    Replace all loguru sinks.

    Args:
        log_level: Minimum level for the console and main log file
        log_to_file: Also write rotating files under ``log_dir``
        log_dir: Directory for log files
        rotation: Size or interval after which the main files rotate
        retention: How long rotated main files are kept
        format_type: One of ``LOG_FORMATS`` ("simple", "detailed", "json")
    """
    logger.remove()

    serialize = format_type == "json"
    fmt = LOG_FORMATS.get(format_type, LOG_FORMATS["detailed"])

    logger.add(sys.stderr, format=fmt, level=log_level, colorize=not serialize,
               serialize=serialize, backtrace=True, diagnose=False)

    if log_to_file:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        common = {"format": fmt, "compression": "zip"}

        logger.add(directory / "dialogue_{time:YYYY-MM-DD}.log", level=log_level,
                   rotation=rotation, retention=retention, serialize=serialize, **common)
        logger.add(directory / "errors_{time:YYYY-MM-DD}.log", level="ERROR",
                   rotation=rotation, retention=retention, backtrace=True, **common)

        for category, (prefix, keep) in AUDIT_FILES.items():
            logger.add(directory / f"{prefix}_{{time:YYYY-MM-DD}}.log", level="INFO",
                       rotation="1 day", retention=keep, filter=_only(category), **common)

    logger.info(f"Logging configured: level={log_level}, files={log_to_file}, format={format_type}")


def init_logging(environment: str = "development", log_level: Optional[str] = None) -> None:
    """
    Configure logging from the preset for ``environment``.

    Unknown environments use the development preset.

    Args:
        environment: "development", "production" or "test"
        log_level: Overrides the preset's level
    """
    options = dict(ENVIRONMENT_PRESETS.get(environment, ENVIRONMENT_PRESETS["development"]))
    if log_level:
        options["log_level"] = log_level.upper()

    configure_logging(**options)
    logger.info(f"Logging initialized for {environment} environment")


def _audit(category: str, event_type: str, **fields: Any) -> None:
    parts = " | ".join(f"{key}={value}" for key, value in fields.items())
    logger.bind(category=category).info(f"{category} {event_type} | {parts}")


def log_booking_event(
    event_type: str,
    session_id: Optional[str] = None,
    booking_id: Optional[str] = None,
    details: Optional[dict] = None
) -> None:
    """
    Write a booking audit record.

    Args:
        event_type: CREATED, UPDATED, STATUS_CHANGED or DELETED
        session_id: Conversation the booking came from, if any
        booking_id: Booking identifier
        details: Extra fields for the record
    """
    _audit("BOOKING", event_type, session=session_id, booking_id=booking_id, details=details or {})


def log_conversation_event(
    event_type: str,
    session_id: Optional[str] = None,
    step: Optional[str] = None,
    details: Optional[dict] = None
) -> None:
    """
    Write a conversation audit record.

    Args:
        event_type: STARTED, STEP_CHANGE, PREFERENCE_UPDATED, RESET or COMPLETED
        session_id: Conversation identifier
        step: Dialogue step at the time of the event
        details: Extra fields for the record
    """
    _audit("CONVERSATION", event_type, session=session_id, step=step, details=details or {})


def log_api_call(
    service: str,
    operation: str,
    success: bool,
    duration: float,
    details: Optional[dict] = None
) -> None:
    """
    Record an outbound API call; failures are logged at WARNING.

    Args:
        service: e.g. "openweather"
        operation: Endpoint or operation name
        success: Whether a usable response came back
        duration: Seconds spent, retries included
        details: Status code or error text
    """
    logger.bind(category="API").log(
        "INFO" if success else "WARNING",
        f"API {service}.{operation} | success={success} | "
        f"duration={duration:.3f}s | details={details or {}}"
    )


def log_error_with_context(
    error: Exception,
    context: dict,
    severity: str = "ERROR"
) -> None:
    """
    Log an exception with the context it happened in.

    The context keys are bound to the record as extra fields.

    Args:
        error: The exception
        context: e.g. session id and operation
        severity: Loguru level name
    """
    logger.bind(category="ERROR", **context).log(
        severity,
        f"{type(error).__name__}: {error} | context={context}"
    )


class LogContext:
    """
    Attach extra fields to every record logged inside a ``with`` block.

    Example:
        with LogContext(session_id="abc"):
            logger.info("Processing utterance")
    """

    def __init__(self, **fields):
        self.fields = fields
        self._contextualized = None

    def __enter__(self):
        self._contextualized = logger.contextualize(**self.fields)
        self._contextualized.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._contextualized is not None:
            self._contextualized.__exit__(exc_type, exc_val, exc_tb)
            self._contextualized = None
