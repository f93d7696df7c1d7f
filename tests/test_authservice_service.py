import pytest

from fonokids.authservice.contracts import (
    CreateAccountRequest, ForgotPasswordRequest, LoginRequest, ResetPasswordRequest, VerifyCodeRequest,
)
from fonokids.authservice.errors import (
    ConflictError, DeliveryError, InternalError, InvalidCredentialsError, InvalidOrExpiredCodeError,
    MissingFieldsError, NoPasswordSetError, NotFoundError, PasswordTooLongError,
)
from fonokids.notifier import DeliveryFailed


def make_user(svc, username="ana", email="user@x.com", password="old-pass"):
    return svc.create_account(
        CreateAccountRequest(username=username, email=email, password=password, full_name="Ana Pérez")
    ).user


def verify(svc, code, email="user@x.com"):
    return svc.verify_code(VerifyCodeRequest(email=email, code=code))


def reset(svc, code, new_password="new-pass", email="user@x.com"):
    return svc.reset_password(ResetPasswordRequest(email=email, code=code, new_password=new_password))


# ---------- login / create ----------

def test_login_by_username_or_email_returns_token_and_public_view(auth_service):
    user = make_user(auth_service)

    by_name = auth_service.login(LoginRequest(username="ana", password="old-pass"))
    by_mail = auth_service.login(LoginRequest(username="user@x.com", password="old-pass"))

    assert by_name.user == by_mail.user == user
    assert by_name.user.name == "Ana Pérez"
    assert "password_hash" not in by_name.model_dump()["user"]
    assert auth_service.verify_token(by_name.token).user_id == user.id


def test_login_failures_do_not_reveal_which_part_was_wrong(auth_service):
    make_user(auth_service)
    with pytest.raises(InvalidCredentialsError) as unknown:
        auth_service.login(LoginRequest(username="nobody", password="old-pass"))
    with pytest.raises(InvalidCredentialsError) as wrong:
        auth_service.login(LoginRequest(username="ana", password="nope"))
    assert unknown.value.message == wrong.value.message
    assert unknown.value.status_code == wrong.value.status_code == 401


def test_login_without_password_hash_fails_explicitly(auth_service, store):
    store.add_patient(username="legacy", email="legacy@x.com", full_name="Legacy", password_hash=None)
    with pytest.raises(NoPasswordSetError):
        auth_service.login(LoginRequest(username="legacy", password="whatever"))


@pytest.mark.parametrize("username,password", [(None, "x"), ("ana", None), ("  ", "x"), ("ana", "")])
def test_login_requires_both_fields(auth_service, username, password):
    with pytest.raises(MissingFieldsError):
        auth_service.login(LoginRequest(username=username, password=password))


def test_create_account_rejects_duplicate_email_or_username(auth_service):
    make_user(auth_service)
    with pytest.raises(ConflictError):
        make_user(auth_service, username="other", email="user@x.com")
    with pytest.raises(ConflictError):
        make_user(auth_service, username="ana", email="other@x.com")


def test_create_account_requires_full_name(auth_service):
    with pytest.raises(MissingFieldsError):
        auth_service.create_account(CreateAccountRequest(username="a", email="a@x.com", password="p"))


# ---------- reset-code lifecycle ----------

def test_forgot_password_issues_zero_padded_code_and_notifies(auth_service, store, notifier, clock):
    user = make_user(auth_service)
    result = auth_service.forgot_password(ForgotPasswordRequest(email="user@x.com"))

    assert result.expires_in_minutes == 10
    [code] = store.codes_for(user.id)
    assert code.code == "042817"
    assert code.used is False
    assert (code.expires_at - clock.now()).total_seconds() == 600

    sent = notifier.last_to("user@x.com")
    assert sent is not None
    assert "042817" in sent.html_body and "042817" in sent.text_body


def test_forgot_password_unknown_email_is_not_found(auth_service, notifier):
    with pytest.raises(NotFoundError):
        auth_service.forgot_password(ForgotPasswordRequest(email="ghost@x.com"))
    assert notifier.outbox == []


def test_second_issuance_invalidates_the_first(auth_service, store):
    user = make_user(auth_service)
    auth_service.forgot_password(ForgotPasswordRequest(email="user@x.com"))
    auth_service.forgot_password(ForgotPasswordRequest(email="user@x.com"))

    assert [c.code for c in store.codes_for(user.id)] == ["551203"]
    with pytest.raises(InvalidOrExpiredCodeError):
        verify(auth_service, "042817")
    assert verify(auth_service, "551203").valid is True


def test_code_lifetime_example(auth_service, clock):
    make_user(auth_service)
    auth_service.forgot_password(ForgotPasswordRequest(email="user@x.com"))

    clock.advance(minutes=5)
    assert verify(auth_service, "042817").valid is True

    clock.advance(minutes=6)
    with pytest.raises(InvalidOrExpiredCodeError):
        verify(auth_service, "042817")


def test_code_is_expired_exactly_at_expires_at(auth_service, clock):
    make_user(auth_service)
    auth_service.forgot_password(ForgotPasswordRequest(email="user@x.com"))

    clock.advance(minutes=9, seconds=59)
    assert verify(auth_service, "042817").valid

    clock.advance(seconds=1)
    with pytest.raises(InvalidOrExpiredCodeError):
        verify(auth_service, "042817")
    with pytest.raises(InvalidOrExpiredCodeError):
        reset(auth_service, "042817")


def test_verify_does_not_consume(auth_service):
    make_user(auth_service)
    auth_service.forgot_password(ForgotPasswordRequest(email="user@x.com"))
    for _ in range(3):
        assert verify(auth_service, "042817").valid


def test_code_is_bound_to_its_email(auth_service):
    make_user(auth_service)
    make_user(auth_service, username="bob", email="bob@x.com")
    auth_service.forgot_password(ForgotPasswordRequest(email="user@x.com"))
    with pytest.raises(InvalidOrExpiredCodeError):
        verify(auth_service, "042817", email="bob@x.com")


def test_reset_rotates_password_and_consumes_code(auth_service, clock):
    make_user(auth_service)
    auth_service.forgot_password(ForgotPasswordRequest(email="user@x.com"))
    clock.advance(minutes=5)

    assert reset(auth_service, "042817").success is True

    with pytest.raises(InvalidOrExpiredCodeError):
        verify(auth_service, "042817")
    with pytest.raises(InvalidOrExpiredCodeError):
        reset(auth_service, "042817", new_password="third-pass")

    assert auth_service.login(LoginRequest(username="ana", password="new-pass")).token
    with pytest.raises(InvalidCredentialsError):
        auth_service.login(LoginRequest(username="ana", password="old-pass"))


def test_reset_requires_all_fields(auth_service):
    with pytest.raises(MissingFieldsError):
        auth_service.reset_password(ResetPasswordRequest(email="user@x.com", code="042817"))


def test_new_code_after_use_supersedes(auth_service):
    make_user(auth_service)
    auth_service.forgot_password(ForgotPasswordRequest(email="user@x.com"))
    reset(auth_service, "042817")
    auth_service.forgot_password(ForgotPasswordRequest(email="user@x.com"))
    assert verify(auth_service, "551203").valid
    reset(auth_service, "551203", new_password="fresh-pass")
    assert auth_service.login(LoginRequest(username="ana", password="fresh-pass")).token


# ---------- failure surfacing ----------

def test_delivery_failure_is_reported_but_code_stays_valid(auth_service, notifier):
    make_user(auth_service)
    notifier.fail_with = DeliveryFailed("smtp down")

    with pytest.raises(DeliveryError) as err:
        auth_service.forgot_password(ForgotPasswordRequest(email="user@x.com"))
    assert err.value.status_code == 500
    assert verify(auth_service, "042817").valid


def test_unexpected_store_failure_becomes_internal_error(auth_service, store, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("connection reset by peer")
    monkeypatch.setattr(store, "get_by_login", boom)

    with pytest.raises(InternalError) as err:
        auth_service.login(LoginRequest(username="ana", password="x"))
    assert "connection reset" not in err.value.message
    assert err.value.status_code == 500


def test_profile_reads_current_account(auth_service):
    user = make_user(auth_service)
    token = auth_service.login(LoginRequest(username="ana", password="old-pass")).token
    claims = auth_service.verify_token(token)
    assert auth_service.get_profile(claims).user == user


def test_profile_of_vanished_account_is_not_found(auth_service):
    make_user(auth_service)
    token = auth_service.login(LoginRequest(username="ana", password="old-pass")).token
    claims = auth_service.verify_token(token).model_copy(update={"user_id": 999})
    with pytest.raises(NotFoundError):
        auth_service.get_profile(claims)


def test_passwords_longer_than_bcrypt_accepts_are_rejected(auth_service):
    with pytest.raises(PasswordTooLongError) as err:
        make_user(auth_service, password="a" * 73)
    assert err.value.status_code == 400

    # 72 bytes of multi-byte characters is still within the limit
    make_user(auth_service, password="ñ" * 36)
    assert auth_service.login(LoginRequest(username="ana", password="ñ" * 36)).token


def test_reset_rejects_overlong_password_and_keeps_code(auth_service):
    make_user(auth_service)
    auth_service.forgot_password(ForgotPasswordRequest(email="user@x.com"))

    with pytest.raises(PasswordTooLongError):
        reset(auth_service, "042817", new_password="ñ" * 37)
    assert verify(auth_service, "042817").valid
    assert reset(auth_service, "042817", new_password="x" * 72).success
