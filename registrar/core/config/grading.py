import typing as t

import annotated_types as ant

from .base import BaseSettings


class GradingSettings(BaseSettings):
    """Knobs for the grade lifecycle and its listings."""

    # recorded on an audit entry when the editor gives no reason
    default_reason: str = "routine update"
    history_page_size: t.Annotated[int, ant.Ge(1), ant.Le(100)] = 10
    log_page_size: t.Annotated[int, ant.Ge(1), ant.Le(100)] = 20
