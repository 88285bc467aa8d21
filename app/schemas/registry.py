from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


class FormModel(BaseModel):
    """
    Base for every record coming in from a form or a JSON file.

    Blank strings mean "not provided" and are stored as None.
    """

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class PersonBase(FormModel):
    first_name: Optional[str] = Field(None, description="First name")
    last_name: Optional[str] = Field(None, description="Last name")
    phone: Optional[str] = Field(None, description="Phone number")
    address: Optional[str] = Field(None, description="Street address")
    city: Optional[str] = Field(None, description="City")
    vin: Optional[str] = Field(None, description="Vin of the car this person owns")


class PersonCreate(PersonBase):
    """Schema for adding a person; the id is assigned by the store."""


class PersonUpdate(PersonBase):
    """Whole-record replacement keyed by id."""
    id: int = Field(..., description="Person ID")


class PersonRecord(PersonUpdate):
    model_config = {"from_attributes": True}


class CarBase(FormModel):
    make: Optional[str] = Field(None, description="Manufacturer")
    model: Optional[str] = Field(None, description="Model name")
    year: Optional[str] = Field(None, description="Model year")

    @field_validator("year", mode="before")
    @classmethod
    def year_as_text(cls, v: Any) -> Any:
        if isinstance(v, int):
            return str(v)
        return v


class CarCreate(CarBase):
    """A car is both added and updated by its vin, so one schema covers both."""
    vin: str = Field(..., min_length=1, description="Vehicle identification number")


class CarRecord(CarCreate):
    model_config = {"from_attributes": True}


class StoreBase(FormModel):
    retailer: Optional[str] = Field(None, description="Retailer name")
    phone: Optional[str] = Field(None, description="Phone number")
    address: Optional[str] = Field(None, description="Street address")
    city: Optional[str] = Field(None, description="City")


class StoreCreate(StoreBase):
    pass


class StoreUpdate(StoreBase):
    id: int = Field(..., description="Store ID")


class StoreRecord(StoreUpdate):
    model_config = {"from_attributes": True}
