"""Pydantic schemas for account endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

LOGIN_PATTERN = r"^(?:[a-zA-Z0-9!$&*+=?^_`{|}~.-]+@[a-zA-Z0-9-]+(?:\.[a-zA-Z0-9-]+)*|[_.@A-Za-z0-9-]+)$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class ProfileUpdate(BaseModel):
    email: str = Field(min_length=5, max_length=254, pattern=EMAIL_PATTERN)
    first_name: str | None = Field(default=None, max_length=50, alias="firstName")
    last_name: str | None = Field(default=None, max_length=50, alias="lastName")
    lang_key: str | None = Field(default=None, min_length=2, max_length=10, alias="langKey")
    image_url: str | None = Field(default=None, max_length=256, alias="imageUrl")

    model_config = {"populate_by_name": True}


class RegisterRequest(ProfileUpdate):
    login: str = Field(min_length=1, max_length=50, pattern=LOGIN_PATTERN)
    # length is checked by the password policy, not here
    password: str


class AccountResponse(BaseModel):
    id: int
    login: str
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    email: str
    image_url: str | None = Field(default=None, alias="imageUrl")
    activated: bool
    lang_key: str | None = Field(default=None, alias="langKey")
    authorities: list[str] = []
    created_at: datetime = Field(alias="createdDate")
    last_modified_at: datetime | None = Field(default=None, alias="lastModifiedDate")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_view(cls, account) -> "AccountResponse":
        return cls(
            id=account.id,
            login=account.login,
            first_name=account.first_name,
            last_name=account.last_name,
            email=account.email,
            image_url=account.image_url,
            activated=account.activated,
            lang_key=account.lang_key,
            authorities=list(account.authorities),
            created_at=account.created_at,
            last_modified_at=account.last_modified_at,
        )


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(alias="currentPassword")
    new_password: str = Field(alias="newPassword")

    model_config = {"populate_by_name": True}


class KeyAndPasswordRequest(BaseModel):
    key: str
    new_password: str = Field(alias="newPassword")

    model_config = {"populate_by_name": True}
