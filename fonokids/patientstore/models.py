from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Patient(Base):
    __tablename__ = "patients"

    id              = Column(Integer, primary_key=True, autoincrement=True)
    username        = Column(String(100), unique=True, nullable=False, index=True)
    email           = Column(String(255), unique=True, nullable=False, index=True)
    password_hash   = Column(String(255), nullable=True)  # accounts may exist without a password
    full_name       = Column(String(255), nullable=True)
    birth_date      = Column(Date, nullable=True)
    age             = Column(Integer, nullable=True)
    sex             = Column(String(20), nullable=True)
    document_number = Column(String(50), nullable=True)
    address         = Column(Text, nullable=True)
    primary_phone   = Column(String(30), nullable=True)
    secondary_phone = Column(String(30), nullable=True)
    active          = Column(Boolean, nullable=False, default=True)
    registered_at   = Column(DateTime(timezone=True), nullable=True)
    updated_at      = Column(DateTime(timezone=True), nullable=True)


class PasswordResetCode(Base):
    __tablename__ = "password_reset_codes"

    id         = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    email      = Column(String(255), nullable=False)
    code       = Column(String(6), nullable=False)  # zero-padded 6-digit string
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used       = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_password_reset_codes_email_code", "email", "code"),
    )
