from __future__ import annotations

from typing import Any, List, Optional, Type, TypeVar

from pydantic import AliasChoices, BaseModel, Field, ValidationError as PydanticValidationError, field_validator, model_validator

from chattrix.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_payload(model: Type[ModelT], data: Any) -> ModelT:
    """Validate a request/socket payload, raising the relay's ValidationError."""
    try:
        return model.model_validate(data or {})
    except PydanticValidationError as exc:
        details = [
            {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg")}
            for err in exc.errors()
        ]
        raise ValidationError("Invalid request payload", details=details) from exc


def _clean_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


# ---------------- Auth ----------------
class SignupInput(BaseModel):
    email: str
    full_name: str = Field(validation_alias=AliasChoices("fullName", "full_name"))
    password: str = Field(min_length=6)
    profile_pic: Optional[str] = Field(default=None, validation_alias=AliasChoices("profilePic", "profile_pic"))

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        cleaned = (value or "").strip().lower()
        if "@" not in cleaned or cleaned.startswith("@") or cleaned.endswith("@"):
            raise ValueError("invalid email address")
        return cleaned

    @field_validator("full_name")
    @classmethod
    def _ensure_name(cls, value: str) -> str:
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValueError("fullName cannot be empty")
        return cleaned


class LoginInput(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return (value or "").strip().lower()


class ProfileUpdateInput(BaseModel):
    full_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("fullName", "full_name"))
    profile_pic: Optional[str] = Field(default=None, validation_alias=AliasChoices("profilePic", "profile_pic"))

    @field_validator("full_name", "profile_pic")
    @classmethod
    def _strip(cls, value: Optional[str]) -> Optional[str]:
        return _clean_optional(value)


# ---------------- Messages ----------------
class MessageInput(BaseModel):
    text: Optional[str] = None
    image: Optional[str] = None  # media reference, stored verbatim

    @field_validator("text", "image")
    @classmethod
    def _strip(cls, value: Optional[str]) -> Optional[str]:
        return _clean_optional(value)

    @model_validator(mode="after")
    def _require_content(self) -> "MessageInput":
        if not self.text and not self.image:
            raise ValueError("Message must contain either text or image")
        return self


class ReactionInput(BaseModel):
    emoji: str = Field(min_length=1, max_length=32)

    @field_validator("emoji")
    @classmethod
    def _strip_emoji(cls, value: str) -> str:
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValueError("emoji cannot be empty")
        return cleaned


# ---------------- Groups ----------------
class GroupCreateInput(BaseModel):
    name: str
    members: List[int] = Field(min_length=1)
    image: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _ensure_name(cls, value: str) -> str:
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValueError("name cannot be empty")
        return cleaned


class GroupUpdateInput(BaseModel):
    name: Optional[str] = None
    image: Optional[str] = None

    @field_validator("name", "image")
    @classmethod
    def _strip(cls, value: Optional[str]) -> Optional[str]:
        return _clean_optional(value)


class MemberInput(BaseModel):
    member_id: int = Field(validation_alias=AliasChoices("memberId", "member_id"))


# ---------------- Socket payloads ----------------
class DirectSignal(BaseModel):
    to_user_id: int = Field(validation_alias=AliasChoices("toUserId", "to_user_id"))


class RoomRef(BaseModel):
    group_id: int = Field(validation_alias=AliasChoices("groupId", "roomId", "group_id"))


class MessageRef(BaseModel):
    message_id: int = Field(validation_alias=AliasChoices("messageId", "message_id"))
