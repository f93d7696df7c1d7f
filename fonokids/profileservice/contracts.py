from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Protocol
from pydantic import BaseModel, ConfigDict

UPDATABLE_FIELDS = (
    "full_name",
    "birth_date",
    "sex",
    "document_number",
    "address",
    "primary_phone",
    "secondary_phone",
    "email",
)

# ---------- Domain Models ----------
class Profile(BaseModel):
    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    birth_date: Optional[date] = None
    age: Optional[int] = None
    sex: Optional[str] = None
    document_number: Optional[str] = None
    address: Optional[str] = None
    primary_phone: Optional[str] = None
    secondary_phone: Optional[str] = None
    registered_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    active: bool = True

@dataclass(frozen=True)
class PartialUpdate:
    """
    Field name -> new value. Only the present entries are written; a present
    None clears the column.
    """
    changes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unknown = set(self.changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")

    @classmethod
    def from_request(cls, req: "UpdateProfileRequest") -> "PartialUpdate":
        return cls(changes=req.model_dump(exclude_unset=True))

    def is_empty(self) -> bool:
        return not self.changes

# ---------- Ports ----------
class ProfileStorePort(Protocol):
    def get_profile(self, account_id: int) -> Optional[Profile]: ...
    def list_profiles(self) -> List[Profile]: ...
    def apply_profile_update(self, account_id: int, values: Dict[str, Any], *, updated_at: datetime) -> Optional[Profile]:
        """Write `values` plus updated_at; ConflictError on a duplicate email; None if the account is gone."""
        ...

# ---------- Service I/O ----------
class UpdateProfileRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    full_name: Optional[str] = None
    birth_date: Optional[date] = None
    sex: Optional[str] = None
    document_number: Optional[str] = None
    address: Optional[str] = None
    primary_phone: Optional[str] = None
    secondary_phone: Optional[str] = None
    email: Optional[str] = None

class ProfileEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: Any = None
