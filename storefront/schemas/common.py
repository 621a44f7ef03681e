# storefront/schemas/common.py
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    """
    Base for every request/response body.

    Python side uses snake_case; the JSON wire format is camelCase
    (productId, variantId, lineId, ...). Both spellings are accepted
    on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(ApiModel, Generic[T]):
    """
    Envelope shared by all endpoints: {success, data?, error?}.
    Error responses are rendered by the handlers in main.py.
    """

    success: bool = True
    data: T | None = None
    error: str | None = None
