import datetime

import pydantic as p


class BaseModel(p.BaseModel):
    """Domain records are values: build a changed copy with `model_copy(update=...)`"""

    model_config = p.ConfigDict(frozen=True)


class WithCtime(BaseModel):
    create_time: datetime.datetime


class WithTimestamps(WithCtime):
    update_time: datetime.datetime
