from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator

from app.models.account import UserRole


class CompanyRegisterRequest(BaseModel):
    name: str = Field(min_length=2, max_length=160)
    drug_license_number: str = Field(
        min_length=1,
        max_length=64,
        validation_alias=AliasChoices("drug_license_number", "drugLicenseNumber"),
    )
    address: str = Field(min_length=1, max_length=255)
    contact_email: str = Field(
        min_length=5,
        max_length=320,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        validation_alias=AliasChoices("contact_email", "contactEmail"),
    )
    contact_phone: str = Field(
        min_length=3,
        max_length=32,
        validation_alias=AliasChoices("contact_phone", "contactPhone"),
    )
    low_stock_threshold: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("low_stock_threshold", "lowStockThreshold"),
    )
    expiry_alert_lead_time: int = Field(
        default=30,
        ge=0,
        validation_alias=AliasChoices("expiry_alert_lead_time", "expiryAlertLeadTime"),
    )
    admin_username: str = Field(
        min_length=3,
        max_length=50,
        pattern=r"^[a-zA-Z0-9_.]+$",
        validation_alias=AliasChoices("admin_username", "adminUsername", "username"),
    )
    admin_password: str = Field(
        min_length=8,
        max_length=128,
        validation_alias=AliasChoices("admin_password", "adminPassword", "password"),
    )
    admin_full_name: str | None = Field(
        default=None,
        max_length=160,
        validation_alias=AliasChoices("admin_full_name", "adminFullName", "fullName"),
    )


class AccountUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=160)
    drug_license_number: str | None = Field(
        default=None,
        max_length=64,
        validation_alias=AliasChoices("drug_license_number", "drugLicenseNumber"),
    )
    address: str | None = Field(default=None, max_length=255)
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
    low_stock_threshold: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("low_stock_threshold", "lowStockThreshold"),
    )
    expiry_alert_lead_time: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("expiry_alert_lead_time", "expiryAlertLeadTime"),
    )


class AccountOut(BaseModel):
    id: int
    name: str
    drug_license_number: str
    address: str
    contact_email: str
    contact_phone: str
    low_stock_threshold: int
    expiry_alert_lead_time: int
    created_at: datetime

    model_config = {"from_attributes": True}


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    token: str


class RegisterResponse(BaseModel):
    account: AccountOut
    user_id: int
    username: str


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9_.]+$")
    password: str = Field(min_length=8, max_length=128)
    full_name: str = Field(min_length=1, max_length=160, validation_alias=AliasChoices("full_name", "fullName"))
    email: str = Field(min_length=5, max_length=320, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    role: UserRole = UserRole.APP_ADMIN

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, value: str | UserRole):
        if isinstance(value, UserRole) or not isinstance(value, str):
            return value
        return value.strip().lower().replace("-", "_").replace(" ", "_")


class UserUpdate(BaseModel):
    password: str | None = Field(default=None, min_length=8, max_length=128)
    full_name: str | None = Field(default=None, max_length=160, validation_alias=AliasChoices("full_name", "fullName"))
    email: str | None = Field(default=None, max_length=320)
    role: UserRole | None = None


class UserOut(BaseModel):
    id: int
    account_id: int
    username: str
    full_name: str
    email: str
    role: UserRole
    created_at: datetime

    model_config = {"from_attributes": True}
