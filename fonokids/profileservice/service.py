from __future__ import annotations
import logging
from datetime import date
from typing import List, Optional

from fonokids.authservice.contracts import ClockPort, TokenClaims
from fonokids.authservice.errors import NotFoundError, ValidationError
from fonokids.authservice.service import SystemClock

from .contracts import PartialUpdate, Profile, ProfileStorePort

logger = logging.getLogger("fonokids.profileservice")

def age_on(birth_date: date, today: date) -> int:
    """Full years elapsed between birth_date and today."""
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years

class ProfileService:
    def __init__(self, *, store: ProfileStorePort, clock: Optional[ClockPort] = None):
        self.store = store
        self.clock = clock or SystemClock()

    def get_profile(self, account_id: int) -> Profile:
        profile = self.store.get_profile(account_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        return profile

    def get_own_profile(self, claims: TokenClaims) -> Profile:
        return self.get_profile(claims.user_id)

    def list_patients(self) -> List[Profile]:
        return self.store.list_profiles()

    def update_profile(self, claims: TokenClaims, update: PartialUpdate) -> Profile:
        if update.is_empty():
            raise ValidationError("No fields to update")

        now = self.clock.now()
        values = dict(update.changes)
        if "birth_date" in values:
            birth_date = values["birth_date"]
            values["age"] = age_on(birth_date, now.date()) if birth_date else None
        if "email" in values and not (values["email"] or "").strip():
            raise ValidationError("Email cannot be empty")

        profile = self.store.apply_profile_update(claims.user_id, values, updated_at=now)
        if profile is None:
            raise NotFoundError("User not found")
        logger.info("profile.update ok account_id=%s fields=%s", claims.user_id, sorted(update.changes))
        return profile
