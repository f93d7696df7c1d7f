import jwt
import pytest

from fonokids.authservice import JWTTokenSigner, PasswordHasher
from fonokids.authservice.errors import InvalidTokenError, TokenExpiredError


def test_hash_verifies_only_the_hashed_password(hasher):
    digest = hasher.hash("s3cret!")
    assert digest != "s3cret!"
    assert hasher.verify("s3cret!", digest)
    assert not hasher.verify("s3cret?", digest)


def test_hash_is_salted(hasher):
    assert hasher.hash("same") != hasher.hash("same")


@pytest.mark.parametrize("digest", ["", "not-a-bcrypt-hash", "$2b$04$short"])
def test_verify_returns_false_on_malformed_digest(hasher, digest):
    assert hasher.verify("anything", digest) is False


def test_default_cost_factor_is_ten():
    digest = PasswordHasher().hash("pw")
    assert digest.split("$")[2] == "10"


def test_token_carries_exactly_the_identity_claims(clock):
    signer = JWTTokenSigner("k", clock=clock)
    token = signer.issue(7, "ana", "ana@x.com")

    claims = signer.verify(token)
    assert claims.user_id == 7
    assert claims.username == "ana"
    assert claims.email == "ana@x.com"
    assert claims.exp - claims.iat == 24 * 3600

    raw = jwt.decode(token, "k", algorithms=["HS256"], options={"verify_exp": False})
    assert set(raw) == {"user_id", "username", "email", "iat", "exp"}


def test_token_expires_at_exact_boundary(clock):
    signer = JWTTokenSigner("k", clock=clock)
    token = signer.issue(1, "ana", "ana@x.com")

    clock.advance(hours=23, minutes=59, seconds=59)
    assert signer.verify(token).user_id == 1

    clock.advance(seconds=1)
    with pytest.raises(TokenExpiredError):
        signer.verify(token)


def test_tampered_or_foreign_tokens_are_rejected(clock):
    signer = JWTTokenSigner("k", clock=clock)
    token = signer.issue(1, "ana", "ana@x.com")
    header, _, sig = token.split(".")
    now = int(clock.now().timestamp())
    other = jwt.encode({"user_id": 2, "username": "eve", "email": "eve@x.com", "iat": now, "exp": now + 60}, "k", algorithm="HS256")
    forged = f"{header}.{other.split('.')[1]}.{sig}"

    with pytest.raises(InvalidTokenError):
        signer.verify(forged)
    with pytest.raises(InvalidTokenError):
        JWTTokenSigner("other-key", clock=clock).verify(token)
    with pytest.raises(InvalidTokenError):
        signer.verify("garbage")


def test_token_missing_claims_is_invalid(clock):
    signer = JWTTokenSigner("k", clock=clock)
    now = int(clock.now().timestamp())
    token = jwt.encode({"user_id": 1, "iat": now, "exp": now + 60}, "k", algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        signer.verify(token)


def test_fits_counts_utf8_bytes():
    assert PasswordHasher.fits("a" * 72)
    assert not PasswordHasher.fits("a" * 73)
    assert PasswordHasher.fits("ñ" * 36)
    assert not PasswordHasher.fits("ñ" * 37)
