from __future__ import annotations
import itertools
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional

from fonokids.authservice.contracts import Account, AuthStorePort, NewAccount, ResetCode
from fonokids.authservice.codes import is_active
from fonokids.authservice.errors import ConflictError
from fonokids.profileservice.contracts import Profile, ProfileStorePort


class InMemoryPatientStore(AuthStorePort, ProfileStorePort):
    """
    Test/dev store. One re-entrant lock guards every read-modify-write, which gives
    the same per-account atomicity as the SQL transactions. Single process only.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._ids = itertools.count(1)
        self._patients: Dict[int, Profile] = {}
        self._hashes: Dict[int, Optional[str]] = {}
        self._codes: List[ResetCode] = []

    def _account(self, profile: Profile) -> Account:
        return Account(
            id=profile.id,
            username=profile.username,
            email=profile.email,
            full_name=profile.full_name,
            password_hash=self._hashes.get(profile.id),
            active=profile.active,
        )

    # Seeding helper for tests; allows accounts without a password
    def add_patient(self, *, username: str, email: str, full_name: Optional[str] = None,
                    password_hash: Optional[str] = None, **profile_fields: Any) -> Account:
        with self._lock:
            if self.identity_taken(username=username, email=email):
                raise ConflictError()
            pid = next(self._ids)
            self._patients[pid] = Profile(id=pid, username=username, email=email, full_name=full_name, **profile_fields)
            self._hashes[pid] = password_hash
            return self._account(self._patients[pid])

    # ---------- Credential store ----------
    def get_by_id(self, account_id: int) -> Optional[Account]:
        with self._lock:
            p = self._patients.get(account_id)
            return self._account(p) if p else None

    def get_by_email(self, email: str) -> Optional[Account]:
        with self._lock:
            for p in self._patients.values():
                if p.email == email:
                    return self._account(p)
            return None

    def get_by_login(self, login: str) -> Optional[Account]:
        with self._lock:
            for pid in sorted(self._patients):
                p = self._patients[pid]
                if p.username == login or p.email == login:
                    return self._account(p)
            return None

    def identity_taken(self, *, username: str, email: str) -> bool:
        with self._lock:
            return any(p.username == username or p.email == email for p in self._patients.values())

    def create_account(self, new: NewAccount, *, now: datetime) -> Account:
        return self.add_patient(
            username=new.username,
            email=new.email,
            full_name=new.full_name,
            password_hash=new.password_hash,
            registered_at=now,
            updated_at=now,
        )

    # ---------- Reset-code store ----------
    def replace_reset_code(self, code: ResetCode) -> None:
        with self._lock:
            self._codes = [c for c in self._codes if c.account_id != code.account_id]
            self._codes.append(code.model_copy())

    def find_active_code(self, *, email: str, code: str, now: datetime) -> Optional[ResetCode]:
        with self._lock:
            for c in reversed(self._codes):
                if c.email == email and c.code == code and is_active(c, now):
                    return c.model_copy()
            return None

    def consume_reset_code(self, *, email: str, code: str, password_hash: str, now: datetime) -> Optional[int]:
        with self._lock:
            for c in reversed(self._codes):
                if c.email == email and c.code == code and is_active(c, now):
                    patient = self._patients.get(c.account_id)
                    if patient is None:
                        return None
                    self._hashes[c.account_id] = password_hash
                    self._patients[c.account_id] = patient.model_copy(update={"updated_at": now})
                    c.used = True
                    return c.account_id
            return None

    def codes_for(self, account_id: int) -> List[ResetCode]:
        with self._lock:
            return [c.model_copy() for c in self._codes if c.account_id == account_id]

    # ---------- Profile store ----------
    def get_profile(self, account_id: int) -> Optional[Profile]:
        with self._lock:
            p = self._patients.get(account_id)
            return p.model_copy() if p else None

    def list_profiles(self) -> List[Profile]:
        with self._lock:
            return [self._patients[pid].model_copy() for pid in sorted(self._patients)]

    def apply_profile_update(self, account_id: int, values: Dict[str, Any], *, updated_at: datetime) -> Optional[Profile]:
        with self._lock:
            p = self._patients.get(account_id)
            if p is None:
                return None
            email = values.get("email")
            if email is not None and any(o.email == email and o.id != account_id for o in self._patients.values()):
                raise ConflictError("Email already in use")
            updated = p.model_copy(update={**values, "updated_at": updated_at})
            self._patients[account_id] = updated
            return updated.model_copy()
