import inspect
import logging.config
import typing as t

from .logging import RegistrarLogger, install_trace_level


class LoggingProvider(object):
    """Container resource that configures logging once from the `logging` settings section"""

    def __init__(self, config: dict[str, t.Any], debug: bool):
        install_trace_level()
        logging.config.dictConfig(config)
        self.capture_warnings(debug)

    def get_logger(self, name: str | None = None) -> RegistrarLogger:
        """Logger for `name`, or for the calling module when omitted"""
        if name is None:
            frame = inspect.currentframe()
            caller = frame.f_back if frame is not None else None
            name = caller.f_globals["__name__"] if caller is not None else "registrar"
        return t.cast(RegistrarLogger, logging.getLogger(name))

    @staticmethod
    def capture_warnings(capture: bool):
        logging.captureWarnings(capture)
