from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, exists, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from fonokids.authservice.contracts import Account, AuthStorePort, NewAccount, ResetCode
from fonokids.authservice.errors import ConflictError
from fonokids.profileservice.contracts import Profile, ProfileStorePort

from .models import PasswordResetCode, Patient

logger = logging.getLogger("fonokids.patientstore")

def _utc(dt: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; every stored value is UTC
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt

def _account(row: Patient) -> Account:
    return Account(
        id=row.id,
        username=row.username,
        email=row.email,
        full_name=row.full_name,
        password_hash=row.password_hash,
        active=bool(row.active),
    )

def _profile(row: Patient) -> Profile:
    return Profile(
        id=row.id,
        username=row.username,
        email=row.email,
        full_name=row.full_name,
        birth_date=row.birth_date,
        age=row.age,
        sex=row.sex,
        document_number=row.document_number,
        address=row.address,
        primary_phone=row.primary_phone,
        secondary_phone=row.secondary_phone,
        registered_at=_utc(row.registered_at),
        updated_at=_utc(row.updated_at),
        active=bool(row.active),
    )

def _reset_code(row: PasswordResetCode) -> ResetCode:
    return ResetCode(
        account_id=row.account_id,
        email=row.email,
        code=row.code,
        expires_at=_utc(row.expires_at),
        used=bool(row.used),
        created_at=_utc(row.created_at),
    )

def _active_code_query(email: str, code: str, now: datetime):
    return (
        select(PasswordResetCode)
        .where(
            PasswordResetCode.email == email,
            PasswordResetCode.code == code,
            PasswordResetCode.used.is_(False),
            PasswordResetCode.expires_at > now,
        )
        .order_by(PasswordResetCode.created_at.desc())
        .limit(1)
    )


class SqlPatientStore(AuthStorePort, ProfileStorePort):
    """
    SQLAlchemy adapter for the patients and password_reset_codes tables.
    Multi-statement operations run in one transaction. Rows are locked with
    SELECT ... FOR UPDATE where the backend supports it (not SQLite); consuming a
    code additionally claims it with a conditional UPDATE so only one caller wins.
    """

    def __init__(self, sessions: sessionmaker):
        self._sessions = sessions

    # ---------- Credential store ----------
    def get_by_id(self, account_id: int) -> Optional[Account]:
        with self._sessions() as session:
            row = session.get(Patient, account_id)
            return _account(row) if row else None

    def get_by_email(self, email: str) -> Optional[Account]:
        with self._sessions() as session:
            row = session.scalars(select(Patient).where(Patient.email == email)).first()
            return _account(row) if row else None

    def get_by_login(self, login: str) -> Optional[Account]:
        with self._sessions() as session:
            row = session.scalars(
                select(Patient).where(or_(Patient.username == login, Patient.email == login)).order_by(Patient.id)
            ).first()
            return _account(row) if row else None

    def identity_taken(self, *, username: str, email: str) -> bool:
        with self._sessions() as session:
            return bool(session.scalar(
                select(exists().where(or_(Patient.username == username, Patient.email == email)))
            ))

    def create_account(self, new: NewAccount, *, now: datetime) -> Account:
        try:
            with self._sessions.begin() as session:
                row = Patient(
                    username=new.username,
                    email=new.email,
                    full_name=new.full_name,
                    password_hash=new.password_hash,
                    active=True,
                    registered_at=now,
                    updated_at=now,
                )
                session.add(row)
                session.flush()
                account = _account(row)
        except IntegrityError as ex:
            raise ConflictError() from ex
        return account

    # ---------- Reset-code store ----------
    def replace_reset_code(self, code: ResetCode) -> None:
        with self._sessions.begin() as session:
            session.execute(select(Patient.id).where(Patient.id == code.account_id).with_for_update())
            session.execute(delete(PasswordResetCode).where(PasswordResetCode.account_id == code.account_id))
            session.add(PasswordResetCode(
                account_id=code.account_id,
                email=code.email,
                code=code.code,
                expires_at=code.expires_at,
                used=False,
                created_at=code.created_at,
            ))

    def find_active_code(self, *, email: str, code: str, now: datetime) -> Optional[ResetCode]:
        with self._sessions() as session:
            row = session.scalars(_active_code_query(email, code, now)).first()
            return _reset_code(row) if row else None

    def consume_reset_code(self, *, email: str, code: str, password_hash: str, now: datetime) -> Optional[int]:
        with self._sessions.begin() as session:
            row = session.scalars(_active_code_query(email, code, now).with_for_update()).first()
            if row is None:
                return None
            # compare-and-set on the used flag; a concurrent consumer that lost the race matches no row
            claimed = session.execute(
                update(PasswordResetCode)
                .where(PasswordResetCode.id == row.id, PasswordResetCode.used.is_(False))
                .values(used=True)
                .execution_options(synchronize_session=False)
            )
            if claimed.rowcount != 1:
                return None
            patient = session.get(Patient, row.account_id, with_for_update=True)
            if patient is None:
                logger.warning("reset code %s references missing account %s", row.id, row.account_id)
                return None
            patient.password_hash = password_hash
            patient.updated_at = now
            return patient.id

    # ---------- Profile store ----------
    def get_profile(self, account_id: int) -> Optional[Profile]:
        with self._sessions() as session:
            row = session.get(Patient, account_id)
            return _profile(row) if row else None

    def list_profiles(self) -> List[Profile]:
        with self._sessions() as session:
            return [_profile(r) for r in session.scalars(select(Patient).order_by(Patient.id))]

    def apply_profile_update(self, account_id: int, values: Dict[str, Any], *, updated_at: datetime) -> Optional[Profile]:
        try:
            with self._sessions.begin() as session:
                row = session.get(Patient, account_id, with_for_update=True)
                if row is None:
                    return None
                email = values.get("email")
                if email is not None and email != row.email:
                    taken = session.scalar(select(exists().where(Patient.email == email, Patient.id != account_id)))
                    if taken:
                        raise ConflictError("Email already in use")
                for name, value in values.items():
                    setattr(row, name, value)
                row.updated_at = updated_at
                session.flush()
                profile = _profile(row)
        except IntegrityError as ex:
            raise ConflictError("Email already in use") from ex
        return profile
