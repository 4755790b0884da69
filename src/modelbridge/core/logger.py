import logging
import sys
import contextvars
from typing import Optional

# Context variable carrying the model currently being expanded
_MODEL_NAME: contextvars.ContextVar[str] = contextvars.ContextVar("model_name", default="-")


class _ModelNameFilter(logging.Filter):
    """Logging filter that injects the model_name from contextvars into the record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        try:
            record.model_name = _MODEL_NAME.get()
        except Exception:
            record.model_name = "-"
        return True


def _build_formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | model=%(model_name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _is_configured() -> bool:
    # Our handler is the one carrying _ModelNameFilter
    for h in logging.getLogger().handlers:
        if isinstance(h, logging.StreamHandler) and any(isinstance(f, _ModelNameFilter) for f in h.filters):
            return True
    return False


def configure_root_logger(level: str = "INFO") -> None:
    """
    Configure root logger and modelbridge-specific logger.

    Root logger stays at INFO to suppress library noise.
    Only modelbridge namespace logs are set to the requested level.

    Args:
        level: Log level for modelbridge logs (DEBUG, INFO, WARNING, ERROR).

    Safe to call multiple times; it will not duplicate handlers (idempotent).
    """
    root = logging.getLogger()

    if _is_configured():
        bridge_logger = logging.getLogger("modelbridge")
        bridge_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter())
    handler.addFilter(_ModelNameFilter())
    handler.setLevel(logging.DEBUG)
    root.addHandler(handler)
    if root.level == logging.NOTSET or root.level > logging.INFO:
        root.setLevel(logging.INFO)

    bridge_logger = logging.getLogger("modelbridge")
    bridge_logger.setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str = "modelbridge", level: Optional[str] = None) -> logging.Logger:
    """
    Get a module-specific logger writing to stdout with the model name in context.

    When ``level`` is omitted the logger inherits from the ``modelbridge``
    namespace logger, so ``configure_root_logger`` controls every module at once.
    """
    if not _is_configured():
        configure_root_logger(level or "INFO")
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger


def push_model_name(model_name: Optional[str]) -> Optional[contextvars.Token]:
    """Set the current model name in context and return a token for later reset."""
    if not model_name:
        return None
    return _MODEL_NAME.set(model_name)


def reset_model_name(token: Optional[contextvars.Token]) -> None:
    """Reset the model name context using the provided token (if any)."""
    if token is None:
        return
    try:
        _MODEL_NAME.reset(token)
    except ValueError:
        # Token created in a different context; leave the current value alone
        pass


def current_model_name() -> str:
    return _MODEL_NAME.get()
