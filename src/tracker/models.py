"""Data models for the job board record store."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.ordering.keys import validate_order_key

# Order key assigned by the store to rows that predate ordering.
LEGACY_ORDER_KEY = "0"


class InvalidStatusError(ValueError):
    """Raised when a value is not one of the board's columns."""


class JobStatus(str, Enum):
    """Column a job application sits in.

    The member order is the left-to-right column order of the board.
    """

    WISHLIST = "WISHLIST"
    APPLIED = "APPLIED"
    INTERVIEW = "INTERVIEW"
    OFFER = "OFFER"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"

    @classmethod
    def parse(cls, value: "str | JobStatus") -> "JobStatus":
        """Return the member for ``value`` without any coercion.

        Raises:
            InvalidStatusError: If ``value`` is not exactly a column name.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidStatusError(f"Invalid status: {value!r}") from None

    @classmethod
    def is_status(cls, value: object) -> bool:
        """Return True if ``value`` names a column."""
        return isinstance(value, str) and value in cls._value2member_map_


@dataclass(frozen=True)
class JobRecord:
    """A tracked job application as one snapshot sees it.

    Only ``id``, ``status``, ``order_key`` and ``created_at`` take part in
    ordering; the remaining fields are carried for display.

    Attributes:
        id: Stable row identifier.
        company: Name of the company.
        status: Column the job sits in.
        order_key: Sortable position within the column.
        created_at: Creation timestamp, used only as a tie-break.
        title: Title of the job role.
        location: Job location.
        job_posting_url: URL of the job posting.
        notes: Free-form personal notes.
        contact_person: Recruiter or referral contact.
        date_applied: Date the application was sent.
        updated_at: Last modification timestamp.
    """

    id: int
    company: str
    status: JobStatus
    order_key: str
    created_at: datetime
    title: str | None = None
    location: str | None = None
    job_posting_url: str | None = None
    notes: str | None = None
    contact_person: str | None = None
    date_applied: date | None = None
    updated_at: datetime | None = field(default=None, compare=False)

    def to_dict(self) -> dict:
        """Serialize the record to a dictionary.

        Returns:
            Dictionary representation of the record.
        """
        return {
            "id": self.id,
            "company": self.company,
            "status": self.status.value,
            "order_key": self.order_key,
            "created_at": self.created_at.isoformat(),
            "title": self.title,
            "location": self.location,
            "job_posting_url": self.job_posting_url,
            "notes": self.notes,
            "contact_person": self.contact_person,
            "date_applied": self.date_applied.isoformat()
            if self.date_applied
            else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "JobRecord":
        """Deserialize a record from a dictionary.

        Args:
            data: Dictionary containing record data.

        Returns:
            JobRecord instance.
        """

        def parse_datetime(value: str | datetime | None) -> datetime | None:
            if value is None:
                return None
            if isinstance(value, datetime):
                return value
            return datetime.fromisoformat(value)

        def parse_date(value: str | date | None) -> date | None:
            if value is None or value == "":
                return None
            if isinstance(value, date):
                return value
            return date.fromisoformat(value)

        return cls(
            id=int(data["id"]),
            company=data["company"],
            status=JobStatus.parse(data["status"]),
            order_key=data.get("order_key") or LEGACY_ORDER_KEY,
            created_at=parse_datetime(data["created_at"]),
            title=data.get("title"),
            location=data.get("location"),
            job_posting_url=data.get("job_posting_url"),
            notes=data.get("notes"),
            contact_person=data.get("contact_person"),
            date_applied=parse_date(data.get("date_applied")),
            updated_at=parse_datetime(data.get("updated_at")),
        )


class PositionUpdate(BaseModel):
    """Payload of a persist request: the new column and order key of a job."""

    model_config = ConfigDict(frozen=True)

    status: JobStatus
    order_key: str

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: object) -> JobStatus:
        """Reject anything that is not exactly a column name."""
        if isinstance(v, JobStatus):
            return v
        if not isinstance(v, str):
            raise ValueError(f"Invalid status type: {type(v)}")
        return JobStatus.parse(v)

    @field_validator("order_key")
    @classmethod
    def validate_order_key(cls, v: str) -> str:
        return validate_order_key(v)


class JobCreate(BaseModel):
    """Fields accepted when adding a job to the board."""

    company: str = Field(min_length=1)
    title: str | None = None
    location: str | None = None
    status: JobStatus = JobStatus.WISHLIST
    job_posting_url: str | None = None
    notes: str | None = None
    contact_person: str | None = None
    date_applied: date | None = None

    @field_validator("company")
    @classmethod
    def validate_company(cls, v: str) -> str:
        value = v.strip()
        if not value:
            raise ValueError("Company name is required")
        return value

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: object) -> JobStatus:
        if isinstance(v, JobStatus):
            return v
        if not isinstance(v, str):
            raise ValueError(f"Invalid status type: {type(v)}")
        return JobStatus.parse(v)

    @field_validator(
        "title", "location", "job_posting_url", "notes", "contact_person", mode="before"
    )
    @classmethod
    def empty_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class JobUpdate(BaseModel):
    """Fields accepted when editing a job; unset fields are left unchanged.

    An empty string clears an optional field. ``company`` can be changed but
    not cleared.
    """

    company: str | None = Field(default=None, min_length=1)
    title: str | None = None
    location: str | None = None
    status: JobStatus | None = None
    job_posting_url: str | None = None
    notes: str | None = None
    contact_person: str | None = None
    date_applied: date | None = None

    @field_validator("company")
    @classmethod
    def validate_company(cls, v: str | None) -> str:
        value = v.strip() if v is not None else ""
        if not value:
            raise ValueError("Company name cannot be empty")
        return value

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: object) -> JobStatus:
        if isinstance(v, JobStatus):
            return v
        if not isinstance(v, str):
            raise ValueError(f"Invalid status type: {type(v)}")
        return JobStatus.parse(v)

    @field_validator(
        "title", "location", "job_posting_url", "notes", "contact_person", mode="before"
    )
    @classmethod
    def empty_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("date_applied", mode="before")
    @classmethod
    def empty_date_to_none(cls, v: object) -> object:
        if v == "":
            return None
        return v

    def changes(self) -> dict:
        """Return only the fields that were explicitly set."""
        return self.model_dump(exclude_unset=True)
