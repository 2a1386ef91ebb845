"""Customer DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).

- ``AddressDTO``: postal address block.
- ``CreateCustomerDTO``: input for customer creation.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator


class AddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""


class CreateCustomerDTO(BaseModel):
    """Immutable DTO for customer creation requests.

    Validates:
    - ``first_name`` / ``last_name`` are non-blank (stripped).
    - ``email`` is a well-formed address, normalised to lower case.
    """

    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    email: EmailStr
    phone: str = ""
    address: AddressDTO = AddressDTO()

    @field_validator("first_name", "last_name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Name fields must not be blank.")
        return v.strip()

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()
