# wilaya_api/delivery/schemas/estimate_input_v1.py
from __future__ import annotations

from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictFloat, StrictInt

# JSON true/false is geen getal
Number = Union[StrictInt, StrictFloat]


class EstimateInputV1(BaseModel):
    """
    POST /estimate body. Everything optional on purpose: presence and range
    checks happen in EstimateRequest.from_input so they produce typed engine
    errors instead of a generic 422.

    Accepts the legacy field names `wilaya` and `value`.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    destination: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("destination", "wilaya")
    )
    weight: Optional[Number] = None
    package_type: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("packageType", "package_type")
    )
    delivery_option: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("deliveryOption", "delivery_option")
    )
    quantity: Optional[StrictInt] = None
    declared_value: Optional[Number] = Field(
        default=None, validation_alias=AliasChoices("declaredValue", "value", "declared_value")
    )
    recurring_customer: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("recurringCustomer", "recurring_customer")
    )
