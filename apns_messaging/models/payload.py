"""
Payload Models: Pydantic schemas for APNs notification messages.

Defines the immutable value objects a caller builds before sending:
- Alert: the user-visible text and localization keys
- Aps: the Apple-reserved dictionary (alert, badge, sound, ...)
- Message: delivery metadata (device token, id, expiration, priority,
  topic, collapse id) plus the Aps dictionary and custom root-level data

Only the fields listed in each model's PAYLOAD_FIELDS are written to the
JSON body. Delivery metadata travels in HTTP headers instead.

See Apple's "Payload Key Reference" for the wire names.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from apns_messaging.core.errors import InvalidArgumentError

# Expiration sentinel: the notification is not stored for redelivery
NO_EXPIRATION = -1


def _is_empty(value: Any) -> bool:
    """None, empty strings and empty collections are left out of the body."""
    if value is None:
        return True
    if isinstance(value, (str, tuple, list, dict)) and len(value) == 0:
        return True
    return False


class PayloadModel(BaseModel):
    """
    Base for models that serialize into the APNs JSON body.

    Subclasses list the fields eligible for the body in PAYLOAD_FIELDS;
    any other field is internal and never serialized.
    """

    model_config = ConfigDict(frozen=True)

    PAYLOAD_FIELDS: ClassVar[tuple[str, ...]] = ()

    def to_payload(self) -> dict[str, Any]:
        """Return the allow-listed fields keyed by their wire names."""
        payload: dict[str, Any] = {}
        fields = type(self).model_fields
        for name in self.PAYLOAD_FIELDS:
            value = getattr(self, name)
            if isinstance(value, PayloadModel):
                value = value.to_payload()
            elif _is_empty(value):
                continue
            elif isinstance(value, tuple):
                value = list(value)
            alias = fields[name].serialization_alias or name
            payload[alias] = value
        return payload


# ======================================================================
# Alert
# ======================================================================

class Alert(PayloadModel):
    """User-visible alert content. Every field is optional."""

    PAYLOAD_FIELDS: ClassVar[tuple[str, ...]] = (
        "title",
        "body",
        "title_loc_key",
        "title_loc_args",
        "action_loc_key",
        "loc_key",
        "loc_args",
        "launch_image",
    )

    title: Optional[str] = None
    body: Optional[str] = None
    title_loc_key: Optional[str] = Field(default=None, serialization_alias="title-loc-key")
    title_loc_args: tuple[str, ...] = Field(default=(), serialization_alias="title-loc-args")
    action_loc_key: Optional[str] = Field(default=None, serialization_alias="action-loc-key")
    loc_key: Optional[str] = Field(default=None, serialization_alias="loc-key")
    loc_args: tuple[str, ...] = Field(default=(), serialization_alias="loc-args")
    launch_image: Optional[str] = Field(default=None, serialization_alias="launch-image")

    @model_validator(mode="before")
    @classmethod
    def absent_args_mean_empty(cls, data: Any) -> Any:
        """An explicit None for a loc-args list is the same as no list."""
        if isinstance(data, dict):
            data = dict(data)
            for name in ("title_loc_args", "loc_args"):
                if name in data and data[name] is None:
                    data[name] = ()
        return data


# ======================================================================
# Aps
# ======================================================================

class Aps(PayloadModel):
    """
    The Apple-reserved "aps" dictionary.

    An alert is mandatory; constructing an Aps without one raises
    InvalidArgumentError.
    """

    PAYLOAD_FIELDS: ClassVar[tuple[str, ...]] = (
        "alert",
        "badge",
        "sound",
        "content_available",
        "category",
        "thread_id",
    )

    alert: Alert
    badge: Optional[int] = None
    sound: Optional[str] = None
    content_available: Optional[int] = Field(default=None, serialization_alias="content-available")
    category: Optional[str] = None
    thread_id: Optional[str] = Field(default=None, serialization_alias="thread-id")

    @model_validator(mode="before")
    @classmethod
    def require_alert(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("alert") is None:
            raise InvalidArgumentError("Alert must not be null")
        return data


# ======================================================================
# Message
# ======================================================================

class Priority(str, Enum):
    """Delivery priority, sent as the apns-priority header."""

    IMMEDIATE = "10"
    THROTTLED = "5"

    @property
    def code(self) -> str:
        """The priority code defined by APNs."""
        return self.value


class Message(PayloadModel):
    """
    A notification addressed to a single device.

    Only `aps` and the custom `data` entries form the JSON body; `data`
    is merged into the root object next to `aps`. The remaining fields
    drive request headers:

    - id → apns-id (when set)
    - expiration → apns-expiration (when greater than -1)
    - priority → apns-priority (defaults to IMMEDIATE, "10")
    - topic → apns-topic (defaults to "")
    - collapse_id → apns-collapse-id (when non-empty)

    Raises:
        InvalidArgumentError: If the device token is missing or empty, the
            aps dictionary is missing, or `data` uses the reserved "aps" key.
    """

    PAYLOAD_FIELDS: ClassVar[tuple[str, ...]] = ("aps",)

    token: str
    id: Optional[UUID] = None
    expiration: int = NO_EXPIRATION
    priority: Priority = Priority.IMMEDIATE
    topic: str = ""
    collapse_id: Optional[str] = None
    data: Mapping[str, str] = Field(default_factory=dict)
    aps: Aps

    @model_validator(mode="before")
    @classmethod
    def check_required_and_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        token = data.get("token")
        if token is None or token == "":
            raise InvalidArgumentError("Token must not be empty")
        if data.get("aps") is None:
            raise InvalidArgumentError("Aps must not be null")

        custom = data.get("data") or {}
        if "aps" in custom:
            raise InvalidArgumentError(
                "Custom data must not use the reserved 'aps' key"
            )

        data = dict(data)
        if data.get("priority") is None:
            data["priority"] = Priority.IMMEDIATE
        if data.get("topic") is None:
            data["topic"] = ""
        if data.get("data") is None:
            data["data"] = {}
        return data

    @field_validator("data", mode="after")
    @classmethod
    def freeze_data(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        """Custom data is read-only once the message is built."""
        return MappingProxyType(dict(value))

    @property
    def is_identifiable(self) -> bool:
        """True when the message carries an id for the apns-id header."""
        return self.id is not None

    @property
    def is_collapsable(self) -> bool:
        """True when a non-empty collapse id is set."""
        return bool(self.collapse_id)

    @property
    def has_expiration(self) -> bool:
        """True when expiration is greater than the -1 sentinel."""
        return self.expiration > NO_EXPIRATION

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload.update(self.data)
        return payload
