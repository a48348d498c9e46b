from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from clinic.core.config import settings
from clinic.core.exceptions import (
    AuthenticationFailure, CredentialExpired, CredentialMalformed, CredentialMissing
)
from clinic.core.security import (
    create_access_token, get_password_hash, verify_credential, verify_password
)

ISSUED = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
LIFETIME = timedelta(minutes=30)


@pytest.fixture
def token():
    return create_access_token(42, now=ISSUED, expires_delta=LIFETIME)


class TestCredentialVerifier:

    def test_valid_token(self, token):
        claims = verify_credential(token, settings.SECRET_KEY, ISSUED + timedelta(minutes=5))
        assert claims.subject_id == "42"
        assert claims.iat == int(ISSUED.timestamp())
        assert claims.exp == int((ISSUED + LIFETIME).timestamp())

    def test_valid_one_second_before_expiry(self, token):
        now = ISSUED + LIFETIME - timedelta(seconds=1)
        assert verify_credential(token, settings.SECRET_KEY, now).subject_id == "42"

    def test_expired_at_expiry(self, token):
        with pytest.raises(CredentialExpired):
            verify_credential(token, settings.SECRET_KEY, ISSUED + LIFETIME)

    def test_expired_one_second_after_expiry(self, token):
        now = ISSUED + LIFETIME + timedelta(seconds=1)
        with pytest.raises(CredentialExpired):
            verify_credential(token, settings.SECRET_KEY, now)

    def test_missing_token(self):
        with pytest.raises(CredentialMissing):
            verify_credential(None, settings.SECRET_KEY, ISSUED)
        with pytest.raises(CredentialMissing):
            verify_credential("", settings.SECRET_KEY, ISSUED)

    def test_garbage_token(self):
        with pytest.raises(CredentialMalformed):
            verify_credential("not-a-jwt", settings.SECRET_KEY, ISSUED)

    def test_wrong_secret(self, token):
        with pytest.raises(CredentialMalformed):
            verify_credential(token, "some-other-secret", ISSUED)

    def test_missing_claims(self):
        token = jwt.encode({"sub": "42"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
        with pytest.raises(CredentialMalformed):
            verify_credential(token, settings.SECRET_KEY, ISSUED)

    def test_issued_in_the_future(self, token):
        with pytest.raises(CredentialMalformed):
            verify_credential(token, settings.SECRET_KEY, ISSUED - timedelta(minutes=1))

    def test_failures_share_public_detail(self, token):
        failures = []
        for bad_token, now in (
            (None, ISSUED),
            ("garbage", ISSUED),
            (token, ISSUED + LIFETIME),
        ):
            with pytest.raises(AuthenticationFailure) as exc_info:
                verify_credential(bad_token, settings.SECRET_KEY, now)
            failures.append(exc_info.value)

        assert {f.detail for f in failures} == {"Could not validate credentials"}
        assert {f.status_code for f in failures} == {401}
        assert len({f.code for f in failures}) == 3


class TestPasswords:

    def test_hash_and_verify(self):
        hashed = get_password_hash("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong", hashed)

    def test_empty_password_never_verifies(self):
        assert not verify_password("", get_password_hash("secret123"))
        assert not verify_password("secret123", "")
