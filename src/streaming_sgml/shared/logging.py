"""Structured logging for building and emitting markup.

Records carry a ``component`` field and any fields bound to the logger, so
that every line written while streaming one document can be traced to the
element or input file that produced it::

    log = get_logger(__name__).bind(file="menu.json")
    log.debug("Streamed document", extra={"flushes": 4})
"""

import logging
from typing import Any, Dict, Optional


class CorrelationLogger:
    """Wrapper around ``logging.Logger`` that stamps records with bound fields."""

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Args:
            name: Logger name (typically __name__)
            correlation_id: Identifier shared by all records of one document
            component: Defaults to the last dotted part of ``name``
            context: Fields added to every record
        """
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.rsplit(".", 1)[-1]
        self.context: Dict[str, Any] = dict(context or {})

    def bind(self, **context: Any) -> "CorrelationLogger":
        """Return a logger for the same component with extra context fields."""
        return CorrelationLogger(
            self.logger.name,
            self.correlation_id,
            self.component,
            {**self.context, **context},
        )

    def is_enabled_for(self, level: int) -> bool:
        return self.logger.isEnabledFor(level)

    def _get_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        fields: Dict[str, Any] = {
            "component": self.component,
            "correlation_id": self.correlation_id,
            **self.context,
        }
        if extra:
            fields.update(extra)
        return fields

    def log(
        self,
        level: int,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
    ) -> None:
        # Skip building the extra mapping for records nobody will see.
        if self.logger.isEnabledFor(level):
            self.logger.log(level, message, extra=self._get_extra(extra), exc_info=exc_info)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self.log(logging.DEBUG, message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self.log(logging.INFO, message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self.log(logging.WARNING, message, extra)

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = True,
    ) -> None:
        """Log an error; the active exception is attached unless ``exc_info`` is False."""
        self.log(logging.ERROR, message, extra, exc_info)


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None,
) -> CorrelationLogger:
    return CorrelationLogger(name, correlation_id, component)


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Set the root level from the command line verbosity flags."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level)
