from datetime import date, datetime

from pydantic import AliasChoices, BaseModel, Field


class ProviderCreate(BaseModel):
    name: str = Field(min_length=1, max_length=160)
    contact_email: str | None = Field(
        default=None,
        max_length=320,
        validation_alias=AliasChoices("contact_email", "contactEmail"),
    )
    contact_phone: str | None = Field(
        default=None,
        max_length=32,
        validation_alias=AliasChoices("contact_phone", "contactPhone"),
    )


class ProviderUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=160)
    contact_email: str | None = Field(
        default=None,
        max_length=320,
        validation_alias=AliasChoices("contact_email", "contactEmail"),
    )
    contact_phone: str | None = Field(
        default=None,
        max_length=32,
        validation_alias=AliasChoices("contact_phone", "contactPhone"),
    )


class ProviderOut(BaseModel):
    id: int
    account_id: int
    name: str
    contact_email: str | None
    contact_phone: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class PatientCreate(BaseModel):
    name: str = Field(min_length=1, max_length=160)
    phone: str | None = Field(default=None, max_length=32)
    address: str | None = Field(default=None, max_length=255)
    date_of_birth: date | None = Field(default=None, validation_alias=AliasChoices("date_of_birth", "dateOfBirth"))
    gender: str | None = Field(default=None, max_length=16)


class PatientUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=160)
    phone: str | None = Field(default=None, max_length=32)
    address: str | None = Field(default=None, max_length=255)
    date_of_birth: date | None = Field(default=None, validation_alias=AliasChoices("date_of_birth", "dateOfBirth"))
    gender: str | None = Field(default=None, max_length=16)


class PatientOut(BaseModel):
    id: int
    account_id: int
    name: str
    phone: str | None
    address: str | None
    date_of_birth: date | None
    gender: str | None

    model_config = {"from_attributes": True}


class CustomerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=160)
    phone: str | None = Field(default=None, max_length=32)
    address: str | None = Field(default=None, max_length=255)


class CustomerUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=160)
    phone: str | None = Field(default=None, max_length=32)
    address: str | None = Field(default=None, max_length=255)


class CustomerOut(BaseModel):
    id: int
    name: str
    phone: str | None
    address: str | None

    model_config = {"from_attributes": True}
