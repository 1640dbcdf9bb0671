"""Pydantic schemas for remote platform payloads."""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ThreadRecord(BaseModel):
    """Normalized cache entry; any other payload field is dropped."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    thread_id: str = Field(..., alias="threadID")
    name: Optional[str] = None
    color: Optional[str] = None
    last_message_timestamp: Optional[int] = Field(default=None, alias="lastMessageTimestamp")
    unread_count: Optional[int] = Field(default=None, alias="unreadCount")


class Friend(BaseModel):
    """A contact. Profile fields other than name and id pass through untouched."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    full_name: str = Field(..., alias="fullName")
    user_id: str = Field(..., alias="userID")


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    token: str
    user_id: str = Field(..., alias="userID")
    app_state: Any = Field(..., alias="appState")


class ThreadMessage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    message_id: str = Field(..., alias="messageID")
    sender_id: str = Field(..., alias="senderID")
    body: str = ""
    timestamp: Optional[int] = None
    attachments: List[Dict[str, Any]] = Field(default_factory=list)
