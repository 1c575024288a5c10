"""Program and persisted-state models.

A Program is one normalized record from the HackerOne hacker API. The
persisted form drops the id (it becomes the mapping key) and adds
``first_seen``.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

PUBLIC_STATE = "public_mode"


def utc_now_iso() -> str:
    """Current UTC time as ISO 8601 with millisecond precision and Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Program(BaseModel):
    """Normalized HackerOne program.

    Attributes:
        id: Program id in canonical string form.
        handle: Short stable name used to build the program URL. Empty
            when the API omits it.
        name: Display name, falls back to handle, then to id.
        state: Visibility state, "public_mode" for public programs.
        submission_state: Whether the program accepts submissions.
        offers_bounties: True for bounty programs, False for VDPs.
        started_accepting_at: ISO timestamp or None.
    """

    id: str = Field(..., min_length=1)
    handle: str = ""
    name: str = ""
    state: Optional[str] = None
    submission_state: Optional[str] = None
    offers_bounties: bool = False
    started_accepting_at: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Numeric and string ids of the same program compare equal."""
        if v is None:
            return v
        return str(v)

    @field_validator("handle", mode="before")
    @classmethod
    def default_handle(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("offers_bounties", mode="before")
    @classmethod
    def default_bounties(cls, v: Any) -> Any:
        return False if v is None else v

    @field_validator("handle", mode="after")
    @classmethod
    def strip_handle(cls, v: str) -> str:
        return v.strip()

    @field_validator("name", mode="after")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @model_validator(mode="after")
    def default_name(self) -> "Program":
        if not self.name:
            self.name = self.handle or self.id
        return self

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "Program":
        """Build from one ``data[]`` item of the JSON:API envelope."""
        attributes = item.get("attributes") or {}
        return cls(
            id=item.get("id"),
            handle=attributes.get("handle"),
            name=attributes.get("name") or "",
            state=attributes.get("state"),
            submission_state=attributes.get("submission_state"),
            offers_bounties=attributes.get("offers_bounties"),
            started_accepting_at=attributes.get("started_accepting_at") or None,
        )

    @property
    def is_public(self) -> bool:
        return self.state == PUBLIC_STATE

    @property
    def url(self) -> str:
        return f"https://hackerone.com/{self.handle}"

    def to_record(self, first_seen: str) -> Dict[str, Any]:
        """Persisted form of this program."""
        return {
            "handle": self.handle,
            "name": self.name,
            "state": self.state,
            "submission_state": self.submission_state,
            "offers_bounties": self.offers_bounties,
            "started_accepting_at": self.started_accepting_at,
            "first_seen": first_seen,
        }


class WatcherState(BaseModel):
    """Persisted watcher state.

    Records are kept as plain dicts: only the top-level shape of the state
    file is validated, individual records are carried through untouched.
    """

    programs: Dict[str, Any] = Field(default_factory=dict)
    last_run: Optional[str] = None

    @property
    def tracked_count(self) -> int:
        return len(self.programs)

    def to_document(self) -> Dict[str, Any]:
        return {"programs": self.programs, "last_run": self.last_run}
