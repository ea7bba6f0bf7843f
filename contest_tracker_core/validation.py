"""
Record schemas using Pydantic v2
Parses loosely-typed store documents into strict records at the store boundary
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import (
    Any,
    Dict,
    Generic,
    Iterable,
    List,
    Literal,
    Mapping,
    Optional,
    Self,
    Tuple,
    Type,
    TypeVar,
)

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as SchemaError

logger = logging.getLogger(__name__)

# Limits from the log form
MIN_ITEM_COUNT = 1
MAX_ITEM_COUNT = 50

COMMENT_MAX_LENGTH = 256
DISPLAY_NAME_MAX_LENGTH = 100

PostType = Literal["entry", "join", "invite"]


# ==================== VALIDATOR FUNCTIONS ====================


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _unique_ids(values: Iterable[str]) -> Tuple[str, ...]:
    """Drop duplicate user ids, keeping first-seen order."""
    seen: set[str] = set()
    unique: List[str] = []
    for user_id in values:
        if not user_id.strip():
            raise ValueError("user id cannot be empty")
        if user_id in seen:
            continue
        seen.add(user_id)
        unique.append(user_id)
    return tuple(unique)


class InputSanitizer:
    """Utility class for input sanitization"""

    @staticmethod
    def sanitize_string(value: str, max_length: int = 255) -> str:
        """Sanitize string input"""
        if not isinstance(value, str):
            return str(value)[:max_length]

        value = value.strip()
        value = value.replace("\0", "")
        return value[:max_length]

    @staticmethod
    def sanitize_display_name(name: str) -> str:
        """Sanitize a user display name; keeps unicode letters and emoji"""
        name = InputSanitizer.sanitize_string(name, DISPLAY_NAME_MAX_LENGTH)
        # Control characters only
        name = re.sub(r"[\x00-\x1f\x7f]", "", name)
        return name.strip()

    @staticmethod
    def sanitize_optional_text(value: Optional[str]) -> Optional[str]:
        """Strip optional free text; blank becomes None"""
        if value is None:
            return None
        value = value.replace("\0", "").strip()
        return value or None


class _Record(BaseModel):
    """Base for records parsed from the store (camelCase keys accepted)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    def to_doc(self) -> Dict[str, Any]:
        """Dump back to a store document with camelCase keys and list values."""
        doc = self.model_dump(by_alias=True, exclude_none=True)
        return {key: _listify(value) for key, value in doc.items()}


def _listify(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, dict):
        return {k: _listify(v) for k, v in value.items()}
    return value


# ==================== RECORDS ====================


class Contest(_Record):
    """A time-boxed contest; only the three dates drive its phase."""

    id: str = ""
    name: str = ""
    start_date: datetime = Field(..., alias="startDate")
    end_date: datetime = Field(..., alias="endDate")
    end_of_review_date: Optional[datetime] = Field(None, alias="endOfReviewDate")

    @field_validator("start_date", "end_date", "end_of_review_date")
    @classmethod
    def normalize_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        return None if v is None else as_utc(v)

    @model_validator(mode="after")
    def validate_date_order(self) -> Self:
        """Reject contests whose dates would leave the phase undefined"""
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        if self.end_of_review_date is not None and self.end_of_review_date < self.end_date:
            raise ValueError("endOfReviewDate must not be before endDate")
        return self


class ContestPost(_Record):
    """A counted activity entry with its reaction and flag state."""

    id: str = Field(..., min_length=1)
    contest_id: str = Field("", alias="contestId")
    user_id: str = Field(..., min_length=1, alias="userId")
    user_name: str = Field("", alias="userName")
    count: int = Field(0, ge=0)
    timestamp: datetime
    description: Optional[str] = None
    image: Optional[str] = None
    type: PostType = "entry"
    invited_users: Tuple[str, ...] = Field(default=(), alias="invitedUsers")

    reactions: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)
    fishy_flags: Tuple[str, ...] = Field(default=(), alias="fishyFlags")
    # Legacy approvals; superseded by reactions['👍']
    upvotes: Optional[Tuple[str, ...]] = None

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return as_utc(v)

    @field_validator("user_name")
    @classmethod
    def validate_user_name(cls, v: str) -> str:
        return InputSanitizer.sanitize_display_name(v)

    @field_validator("description", "image")
    @classmethod
    def validate_optional_text(cls, v: Optional[str]) -> Optional[str]:
        return InputSanitizer.sanitize_optional_text(v)

    @field_validator("fishy_flags", "invited_users")
    @classmethod
    def dedupe_user_ids(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        return _unique_ids(v)

    @field_validator("upvotes")
    @classmethod
    def dedupe_upvotes(cls, v: Optional[Tuple[str, ...]]) -> Optional[Tuple[str, ...]]:
        if v is None:
            return v
        return _unique_ids(v)

    @field_validator("reactions")
    @classmethod
    def validate_reactions(
        cls, v: Dict[str, Tuple[str, ...]]
    ) -> Dict[str, Tuple[str, ...]]:
        """Validate emoji keys and de-duplicate each user set

        Keys that only differ by surrounding whitespace are merged, not overwritten.
        """
        cleaned: Dict[str, Tuple[str, ...]] = {}
        for emoji, user_ids in v.items():
            key = emoji.strip()
            if not key:
                raise ValueError("reaction emoji cannot be empty")
            cleaned[key] = _unique_ids(cleaned.get(key, ()) + tuple(user_ids))
        return cleaned


class Comment(_Record):
    """A comment on a post; immutable once created."""

    id: str = Field(..., min_length=1)
    post_id: str = Field(..., min_length=1, alias="postId")
    user_id: str = Field(..., min_length=1, alias="userId")
    user_name: str = Field("", alias="userName")
    text: str
    timestamp: datetime

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Trimmed, non-empty, at most COMMENT_MAX_LENGTH characters"""
        v = v.strip()
        if len(v) == 0:
            raise ValueError("comment text cannot be empty")
        if len(v) > COMMENT_MAX_LENGTH:
            raise ValueError(f"comment text cannot exceed {COMMENT_MAX_LENGTH} characters")
        return v

    @field_validator("user_name")
    @classmethod
    def validate_user_name(cls, v: str) -> str:
        return InputSanitizer.sanitize_display_name(v)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return as_utc(v)


class User(_Record):
    id: str = Field(..., min_length=1)
    display_name: str = Field("", alias="displayName")
    total_count: int = Field(0, ge=0, alias="totalCount")
    is_admin: bool = Field(False, alias="isAdmin")

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, v: str) -> str:
        return InputSanitizer.sanitize_display_name(v)


class PostDraft(BaseModel):
    """Input from the log form before it becomes a post"""

    count: int = Field(
        MIN_ITEM_COUNT,
        ge=MIN_ITEM_COUNT,
        le=MAX_ITEM_COUNT,
        description=f"Items consumed ({MIN_ITEM_COUNT}-{MAX_ITEM_COUNT})",
    )
    description: Optional[str] = None
    image: Optional[str] = Field(None, description="Uploaded image URL")

    @field_validator("description", "image")
    @classmethod
    def validate_optional_text(cls, v: Optional[str]) -> Optional[str]:
        return InputSanitizer.sanitize_optional_text(v)


# ==================== STORE BOUNDARY ====================

RecordT = TypeVar("RecordT", bound=BaseModel)


@dataclass
class RejectedRecord:
    doc_id: str | None
    reason: str


@dataclass
class ParseReport(Generic[RecordT]):
    """Records that parsed cleanly plus the documents that were quarantined."""

    records: List[RecordT] = field(default_factory=list)
    rejected: List[RejectedRecord] = field(default_factory=list)


def parse_records(
    model: Type[RecordT], docs: Iterable[Mapping[str, Any]]
) -> ParseReport[RecordT]:
    """
    Validate raw store documents into ``model`` records.

    Malformed documents never reach the caller as partial records: they are
    collected in ``rejected`` with the validation message and logged.
    """
    report: ParseReport[RecordT] = ParseReport()
    for doc in docs:
        raw_id = doc.get("id") if isinstance(doc, Mapping) else None
        doc_id = str(raw_id) if raw_id is not None else None
        try:
            report.records.append(model.model_validate(doc))
        except SchemaError as e:
            logger.warning(
                f"Quarantined {model.__name__} {doc_id}: {e.error_count()} validation error(s)"
            )
            report.rejected.append(RejectedRecord(doc_id=doc_id, reason=str(e)))
    return report


# ==================== EXPORT ====================

__all__ = [
    "COMMENT_MAX_LENGTH",
    "MAX_ITEM_COUNT",
    "MIN_ITEM_COUNT",
    "Comment",
    "Contest",
    "ContestPost",
    "InputSanitizer",
    "ParseReport",
    "PostDraft",
    "RejectedRecord",
    "SchemaError",
    "User",
    "as_utc",
    "parse_records",
]
