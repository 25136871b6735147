from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

# Documents carry a bson ObjectId under "_id"; the API exposes its hex form.
ObjectIdStr = Annotated[str, BeforeValidator(str)]


def _as_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return str(value)


# Updates are written unvalidated, so a stored field may hold anything.
StoredText = Annotated[str | None, BeforeValidator(_as_text)]


def _as_subdocument(value: Any) -> Any:
    if isinstance(value, (dict, BaseModel)):
        return value
    return {}


class Authentication(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password: StoredText = None
    salt: StoredText = None
    session_token: StoredText = Field(default=None, alias="sessionToken")


class AuthenticationCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password: str = Field(min_length=1)
    salt: str | None = None
    session_token: str | None = Field(default=None, alias="sessionToken")


class UserBase(BaseModel):
    username: str = Field(min_length=1)
    email: str = Field(min_length=1)


class UserCreate(UserBase):
    authentication: AuthenticationCreate


class UserUpdate(BaseModel):
    # Omitted fields stay unset; an explicit null or "" is rejected.
    username: str = Field(default=None, min_length=1)
    email: str = Field(default=None, min_length=1)


class User(BaseModel):
    """A stored user document.

    Fields excluded by the read projection come back as None on
    ``authentication``. ``username`` and ``email`` are read as stored: a
    partial update can leave them missing or non-text.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: ObjectIdStr = Field(validation_alias="_id")
    username: StoredText = None
    email: StoredText = None
    authentication: Annotated[Authentication, BeforeValidator(_as_subdocument)] = Field(
        default_factory=Authentication
    )


class UserRead(BaseModel):
    id: str
    username: str | None
    email: str | None
