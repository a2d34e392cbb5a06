import logging
import typing as t

TRACE: t.Final[int] = 5


class RegistrarLogger(logging.Logger):
    """Logger with a `trace` method below DEBUG"""

    def trace(self, message: str, *args: t.Any, **kwargs: t.Any) -> None:
        if self.isEnabledFor(TRACE):
            self._log(TRACE, message, args, **kwargs)


def install_trace_level() -> None:
    logging.setLoggerClass(RegistrarLogger)
    logging.addLevelName(TRACE, "TRACE")
