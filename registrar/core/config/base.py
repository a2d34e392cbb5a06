import typing as t

from pydantic_settings import BaseSettings as PydanticBaseSettings


class BaseSettings(PydanticBaseSettings):
    """A settings section; the container hands sections over as plain dicts, so accept one positionally"""

    def __init__(self, cf: dict[str, t.Any] | None = None, **kwargs: t.Any):
        if cf is not None:
            kwargs = {**cf, **kwargs}
        super().__init__(**kwargs)
