"""Schema of the `logging` section, a `logging.config.dictConfig` document

Validated up front so a typo in logging.yaml fails at boot rather than
leaving the service silently unlogged. Keys that dictConfig spells `()` and
`class` are aliased; dump with `by_alias=True` before handing it over.
"""

import typing as t

import pydantic as p

from .base import BaseSettings

# logging's own levels plus TRACE, see registrar.core.logging
LogLevel = t.Literal["NOTSET", "TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class FormatterSettings(BaseSettings):
    factory: t.Literal["colorlog.ColoredFormatter"] = p.Field(alias="()")
    format: str | None = None
    datefmt: str | None = None
    log_colors: dict[LogLevel, str] | None = None
    no_color: bool = False


class StreamHandlerSettings(BaseSettings):
    handler: t.Literal["colorlog.StreamHandler", "logging.StreamHandler"] = p.Field(alias="class")
    formatter: str
    level: LogLevel = "NOTSET"
    stream: str = "ext://sys.stderr"


class LoggerSettings(BaseSettings):
    level: LogLevel = "NOTSET"
    propagate: bool = True
    handlers: list[str] | None = None


class RootLoggerSettings(BaseSettings):
    handlers: list[str]
    level: LogLevel = "WARNING"


class LoggingSettings(BaseSettings):
    version: t.Literal[1]
    disable_existing_loggers: bool = False
    formatters: dict[str, FormatterSettings]
    handlers: dict[str, StreamHandlerSettings]
    root: RootLoggerSettings
    loggers: dict[str, LoggerSettings] = {}

    @p.model_validator(mode="after")
    def _handlers_resolve(self) -> t.Self:
        for name, handler in self.handlers.items():
            if handler.formatter not in self.formatters:
                raise ValueError(f"handler {name!r} uses unknown formatter {handler.formatter!r}")
        for handler in self.root.handlers:
            if handler not in self.handlers:
                raise ValueError(f"root logger uses unknown handler {handler!r}")
        return self
