"""Pydantic schemas for carrier rate card charge configuration.

Rate cards are stored with the camelCase keys carriers upload (including the
historical `miscellanousCharges` / `insuaranceCharges` spellings). Every field
has a default so a partial document resolves to a complete PriceRate once,
at load time.
"""
import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Volumetric divisor (cm³ per kg), standard for surface freight
DEFAULT_K_FACTOR = 5000


def _blank_to_zero(value: Any) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0.0
    return value


class ChargeComponent(BaseModel):
    """A charge with a fixed amount and a variable percentage."""
    model_config = ConfigDict(extra='ignore', allow_inf_nan=False)

    fixed: float = 0.0
    variable: float = 0.0  # whole percent

    @field_validator('fixed', 'variable', mode='before')
    @classmethod
    def none_to_zero(cls, v):
        return _blank_to_zero(v)


class PriceRate(BaseModel):
    """Charge configuration applied on top of base freight."""
    model_config = ConfigDict(populate_by_name=True, extra='ignore', allow_inf_nan=False)

    k_factor: float = Field(DEFAULT_K_FACTOR, alias='kFactor')

    # Flat charges
    docket_charges: float = Field(0.0, alias='docketCharges')
    min_charges: float = Field(0.0, alias='minCharges')
    green_tax: float = Field(0.0, alias='greenTax')
    dacc_charges: float = Field(0.0, alias='daccCharges')
    miscellaneous_charges: float = Field(0.0, alias='miscellanousCharges')

    # Percent of base freight
    fuel: float = 0.0

    # Greater of fixed or percent of base freight
    rov_charges: ChargeComponent = Field(default_factory=ChargeComponent, alias='rovCharges')
    insurance_charges: ChargeComponent = Field(default_factory=ChargeComponent, alias='insuaranceCharges')
    fm_charges: ChargeComponent = Field(default_factory=ChargeComponent, alias='fmCharges')
    appointment_charges: ChargeComponent = Field(default_factory=ChargeComponent, alias='appointmentCharges')

    # Fixed plus percent of chargeable weight
    handling_charges: ChargeComponent = Field(default_factory=ChargeComponent, alias='handlingCharges')
    oda_charges: ChargeComponent = Field(default_factory=ChargeComponent, alias='odaCharges')

    @model_validator(mode='before')
    @classmethod
    def resolve_k_factor(cls, data):
        """Accept the legacy `divisor` key; fall back to the default divisor."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        k_factor = data.pop('kFactor', None)
        if k_factor is None:
            k_factor = data.pop('k_factor', None)
        divisor = data.pop('divisor', None)
        if k_factor is None:
            k_factor = divisor
        try:
            k_factor = float(k_factor)
        except (TypeError, ValueError):
            k_factor = DEFAULT_K_FACTOR
        if not math.isfinite(k_factor) or k_factor <= 0:
            k_factor = DEFAULT_K_FACTOR
        data['kFactor'] = k_factor
        return data

    @field_validator(
        'docket_charges', 'min_charges', 'green_tax', 'dacc_charges',
        'miscellaneous_charges', 'fuel',
        mode='before'
    )
    @classmethod
    def none_to_zero(cls, v):
        return _blank_to_zero(v)

    @field_validator(
        'rov_charges', 'insurance_charges', 'fm_charges',
        'appointment_charges', 'handling_charges', 'oda_charges',
        mode='before'
    )
    @classmethod
    def none_to_empty_component(cls, v):
        return {} if v is None else v

    def to_document(self) -> dict:
        """Storage form, keyed the way carriers upload it."""
        return self.model_dump(by_alias=True)
