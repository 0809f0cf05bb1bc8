# chat_triggers/domain/schemas.py
from collections.abc import Callable
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Document(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True, extra="allow", coerce_numbers_to_str=True
    )


class MessageDocument(Document):
    sender_id: str | None = Field(None, alias="senderId")
    text: str | None = None
    recipient_id: str | None = Field(None, alias="recipientId")
    is_group_message: bool = Field(False, alias="isGroupMessage")
    group_members: list[str] | None = Field(None, alias="groupMembers")

    @field_validator("is_group_message", mode="before")
    @classmethod
    def only_literal_true(cls, value: Any) -> bool:
        return value is True

    @field_validator("group_members", mode="before")
    @classmethod
    def only_lists(cls, value: Any) -> list[str] | None:
        if not isinstance(value, list):
            return None
        return [member for member in value if isinstance(member, str)]


class ChatDocument(Document):
    participants: list[str] | None = None
    group_name: str | None = Field(None, alias="groupName")
    name: str | None = None
    deleted_for: dict[str, Any] | None = Field(None, alias="deletedFor")

    @field_validator("participants", mode="before")
    @classmethod
    def only_participant_lists(cls, value: Any) -> list[str] | None:
        return value if isinstance(value, list) else None

    @field_validator("deleted_for", mode="before")
    @classmethod
    def only_flag_maps(cls, value: Any) -> dict[str, Any] | None:
        return value if isinstance(value, dict) else None

    @property
    def display_name(self) -> str | None:
        return self.group_name or self.name or None

    def deleted_for_everyone(self) -> bool:
        """True when at least two participants exist and every one of them
        has flagged the chat as deleted.

        Flags must be literally ``True``; truthy strings or numbers do not count.
        """
        if not self.deleted_for or not self.participants or len(self.participants) < 2:
            return False
        return all(self.deleted_for.get(uid) is True for uid in self.participants)


class UserDocument(Document):
    name: str | None = None
    display_name: str | None = Field(None, alias="displayName")
    username: str | None = None
    email: str | None = None
    delivery_token: str | None = Field(
        None,
        validation_alias=AliasChoices("deliveryToken", "fcmToken", "delivery_token"),
    )


def _email_local_part(user: UserDocument) -> str | None:
    if not user.email:
        return None
    return user.email.split("@")[0]


# Order is user-visible: the first non-empty value wins.
DISPLAY_NAME_EXTRACTORS: tuple[Callable[[UserDocument], str | None], ...] = (
    lambda user: user.name,
    lambda user: user.display_name,
    lambda user: user.username,
    _email_local_part,
)


def resolve_display_name(user: UserDocument | None, default: str) -> str:
    if user is None:
        return default
    for extract in DISPLAY_NAME_EXTRACTORS:
        value = extract(user)
        if value:
            return value
    return default


class PushNotification(BaseModel):
    title: str
    body: str


class PushMessage(BaseModel):
    token: str
    notification: PushNotification
    data: dict[str, str]
