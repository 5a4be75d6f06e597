# venue_booking/api/schemas/common.py

from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from venue_booking.infrastructure.repositories.base import Page


def ensure_utc(value: datetime) -> datetime:
    # Naive values are taken to be UTC already.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]

Money = Annotated[
    Decimal,
    PlainSerializer(lambda value: float(value), return_type=float, when_used="json"),
]


class CamelModel(BaseModel):
    """Wire models use camelCase; Python code uses snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class OrmModel(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


def page_response(page: Page, schema: type[BaseModel]) -> dict:
    return {
        "items": [dump(schema.model_validate(item)) for item in page.items],
        "pagination": PaginationMeta(
            page=page.page,
            limit=page.limit,
            total=page.total,
            pages=page.pages,
        ).model_dump(by_alias=True),
    }


def dump(model: BaseModel) -> dict:
    return model.model_dump(mode="json", by_alias=True)
