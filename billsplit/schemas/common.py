"""Common schemas used across multiple modules"""
from decimal import Decimal
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from billsplit.utils.coercion import (MAX_AMOUNT, MAX_QUANTITY,
                                      MAX_TEXT_LENGTH, MIN_QUANTITY,
                                      strip_markup)


class CamelModel(BaseModel):
    """Immutable schema exchanged as camelCase JSON"""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


# Names shown to other participants never carry markup characters
DisplayName = Annotated[
    str, Field(max_length=MAX_TEXT_LENGTH), AfterValidator(strip_markup)
]

# Same, but never empty
RequiredName = Annotated[
    str, Field(min_length=1, max_length=MAX_TEXT_LENGTH), AfterValidator(strip_markup)
]

Money = Annotated[Decimal, Field(ge=0, lt=MAX_AMOUNT)]

Quantity = Annotated[int, Field(ge=MIN_QUANTITY, le=MAX_QUANTITY)]
