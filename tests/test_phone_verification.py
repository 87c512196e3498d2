import logging
from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException

from app.models.phone_verification import PhoneVerification
from app.models.user import User
from app.services.auth_service import decode_access_token
from app.services.phone_verification_service import (
    DispatchOutcome,
    VerificationMethod,
    generate_otp_code,
    generate_verification_token,
    request_code,
    verify_code,
)
from conftest import FakeTwilioError, FakeVerifyProvider

PHONE = "+15551234567"
SEND_URL = "/api/auth/send-phone-verification-code"
VERIFY_URL = "/api/auth/verify-phone-code"


def _latest_row(db_session, phone=PHONE) -> PhoneVerification:
    db_session.expire_all()
    return (
        db_session.query(PhoneVerification)
        .filter(PhoneVerification.phone == phone)
        .order_by(PhoneVerification.id.desc())
        .first()
    )


def test_generated_codes_are_six_digits_in_range():
    for _ in range(500):
        code = generate_otp_code()
        assert len(code) == 6
        assert code.isdigit()
        assert 100000 <= int(code) <= 999999


def test_verification_tokens_are_random_hex():
    first, second = generate_verification_token(), generate_verification_token()
    assert len(first) == 64
    int(first, 16)
    assert first != second


def test_send_code_without_provider_logs_code_only(client, db_session, caplog):
    caplog.set_level(logging.INFO, logger="app.services.phone_verification_service")

    response = client.post(SEND_URL, json={"phone": PHONE})

    assert response.status_code == 200
    payload = response.json()
    assert payload["data"] == {"success": True, "phone": PHONE}

    row = _latest_row(db_session)
    assert row is not None
    assert row.verified_at is None
    assert row.expires_at - row.created_at == timedelta(minutes=10)
    assert f"OTP for {PHONE}: {row.code}" in caplog.text


def test_send_code_twice_within_cooldown_is_rate_limited(client):
    first = client.post(SEND_URL, json={"phone": PHONE})
    second = client.post(SEND_URL, json={"phone": PHONE})

    assert first.status_code == 200
    assert second.status_code == 429
    assert second.json()["message"] == "Please wait 1 minute before requesting another code"


def test_cooldown_is_per_phone(client):
    assert client.post(SEND_URL, json={"phone": PHONE}).status_code == 200
    assert client.post(SEND_URL, json={"phone": "+15557654321"}).status_code == 200


def test_send_code_after_cooldown_creates_another_row(client, db_session):
    client.post(SEND_URL, json={"phone": PHONE})
    row = _latest_row(db_session)
    row.created_at = datetime.utcnow() - timedelta(seconds=61)
    db_session.commit()

    response = client.post(SEND_URL, json={"phone": PHONE})

    assert response.status_code == 200
    assert db_session.query(PhoneVerification).filter(PhoneVerification.phone == PHONE).count() == 2


@pytest.mark.parametrize("phone", ["", "12", "not-a-phone", "+0123456789"])
def test_send_code_rejects_invalid_phone(client, phone):
    response = client.post(SEND_URL, json={"phone": phone})

    assert response.status_code == 400
    payload = response.json()
    assert payload["message"] == "Validation failed"
    assert payload["data"]["details"][0]["field"] == "phone"
    assert payload["data"]["details"][0]["message"] == "Valid phone number is required"


def test_send_code_normalizes_phone_formatting(client, db_session):
    response = client.post(SEND_URL, json={"phone": "+1 (555) 123-4567"})

    assert response.status_code == 200
    assert response.json()["data"]["phone"] == PHONE
    assert _latest_row(db_session) is not None


def test_logged_code_verifies_and_creates_user(client, db_session):
    client.post(SEND_URL, json={"phone": PHONE})
    code = _latest_row(db_session).code

    response = client.post(VERIFY_URL, json={"phone": PHONE, "code": code, "fullName": "Priya Sharma"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["phone"] == PHONE
    assert data["user"]["name"] == "Priya Sharma"
    assert data["user"]["isVerified"] is True
    assert decode_access_token(data["token"])["userId"] == data["user"]["id"]
    assert _latest_row(db_session).verified_at is not None


def test_code_verifies_only_once(client, db_session):
    client.post(SEND_URL, json={"phone": PHONE})
    code = _latest_row(db_session).code

    first = client.post(VERIFY_URL, json={"phone": PHONE, "code": code})
    second = client.post(VERIFY_URL, json={"phone": PHONE, "code": code})

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["message"] == "Invalid or expired verification code"


def test_expired_code_is_rejected(client, db_session):
    client.post(SEND_URL, json={"phone": PHONE})
    row = _latest_row(db_session)
    code = row.code
    # eleven minutes after the request
    row.created_at = datetime.utcnow() - timedelta(minutes=11)
    row.expires_at = row.created_at + timedelta(minutes=10)
    db_session.commit()

    response = client.post(VERIFY_URL, json={"phone": PHONE, "code": code})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid or expired verification code"
    assert _latest_row(db_session).verified_at is None


def test_wrong_code_is_rejected(client, db_session):
    client.post(SEND_URL, json={"phone": PHONE})
    code = _latest_row(db_session).code
    wrong = "100000" if code != "100000" else "100001"

    response = client.post(VERIFY_URL, json={"phone": PHONE, "code": wrong})

    assert response.status_code == 400


@pytest.mark.parametrize("code", ["12345", "1234567", "abcdef"])
def test_verify_rejects_malformed_code(client, code):
    response = client.post(VERIFY_URL, json={"phone": PHONE, "code": code})

    assert response.status_code == 400
    assert response.json()["data"]["details"][0]["message"] == "6-digit code is required"


def test_verify_defaults_name_for_new_user(client, db_session):
    client.post(SEND_URL, json={"phone": PHONE})
    code = _latest_row(db_session).code

    response = client.post(VERIFY_URL, json={"phone": PHONE, "code": code})

    assert response.json()["data"]["user"]["name"] == "User"


def test_verify_updates_existing_user(client, db_session, make_user):
    existing = make_user(phone=PHONE, name="Old Name", phone_verified=False)
    client.post(SEND_URL, json={"phone": PHONE})
    code = _latest_row(db_session).code

    response = client.post(VERIFY_URL, json={"phone": PHONE, "code": code, "fullName": "New Name"})

    assert response.status_code == 200
    assert response.json()["data"]["user"]["id"] == str(existing.id)
    db_session.expire_all()
    user = db_session.query(User).filter(User.phone == PHONE).one()
    assert user.name == "New Name"
    assert user.phone_verified is True
    assert user.last_login_at is not None


def test_verify_keeps_name_when_not_supplied(client, db_session, make_user):
    make_user(phone=PHONE, name="Kept Name")
    client.post(SEND_URL, json={"phone": PHONE})
    code = _latest_row(db_session).code

    response = client.post(VERIFY_URL, json={"phone": PHONE, "code": code})

    assert response.json()["data"]["user"]["name"] == "Kept Name"


def test_provider_send_is_used_when_configured(client, use_provider, db_session):
    provider = use_provider(FakeVerifyProvider())

    response = client.post(SEND_URL, json={"phone": PHONE})

    assert response.status_code == 200
    assert provider.started == [PHONE]
    assert _latest_row(db_session) is not None


def test_provider_send_failure_still_reports_success(client, use_provider, caplog):
    caplog.set_level(logging.INFO, logger="app.services.phone_verification_service")
    use_provider(FakeVerifyProvider(start_error=FakeTwilioError(429, "Too many requests")))

    response = client.post(SEND_URL, json={"phone": PHONE})

    assert response.status_code == 200
    assert response.json()["data"]["success"] is True
    assert "rate limit" in caplog.text
    assert DispatchOutcome.PROVIDER_FAILED.value in caplog.text


def test_provider_approval_leaves_stored_code_untouched(client, use_provider, db_session):
    provider = use_provider(FakeVerifyProvider(check_status="approved"))
    client.post(SEND_URL, json={"phone": PHONE})
    stored = _latest_row(db_session).code
    provider_code = "654321" if stored != "654321" else "123456"

    response = client.post(VERIFY_URL, json={"phone": PHONE, "code": provider_code})

    assert response.status_code == 200
    assert provider.checked == [(PHONE, provider_code)]
    assert _latest_row(db_session).verified_at is None


def test_provider_rejection_fails_even_with_valid_stored_code(client, use_provider, db_session):
    use_provider(FakeVerifyProvider(check_status="pending"))
    client.post(SEND_URL, json={"phone": PHONE})
    code = _latest_row(db_session).code

    response = client.post(VERIFY_URL, json={"phone": PHONE, "code": code})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid verification code"
    assert _latest_row(db_session).verified_at is None
    assert db_session.query(User).count() == 0


def test_provider_error_falls_back_to_stored_code(client, use_provider, db_session):
    use_provider(FakeVerifyProvider(check_error=FakeTwilioError(500)))
    client.post(SEND_URL, json={"phone": PHONE})
    code = _latest_row(db_session).code

    response = client.post(VERIFY_URL, json={"phone": PHONE, "code": code})

    assert response.status_code == 200
    assert _latest_row(db_session).verified_at is not None


def test_provider_error_with_wrong_code_fails_fallback(client, use_provider, db_session):
    use_provider(FakeVerifyProvider(check_error=FakeTwilioError(429)))
    client.post(SEND_URL, json={"phone": PHONE})
    code = _latest_row(db_session).code
    wrong = "999999" if code != "999999" else "999998"

    response = client.post(VERIFY_URL, json={"phone": PHONE, "code": wrong})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid or expired verification code"


def test_request_code_reports_dispatch_outcomes(db_session):
    assert request_code(db_session, None, "+15550000001") is DispatchOutcome.PROVIDER_SKIPPED
    assert request_code(db_session, FakeVerifyProvider(), "+15550000002") is DispatchOutcome.PROVIDER_SENT
    failing = FakeVerifyProvider(start_error=FakeTwilioError(503))
    assert request_code(db_session, failing, "+15550000003") is DispatchOutcome.PROVIDER_FAILED


def test_request_code_raises_inside_cooldown(db_session):
    request_code(db_session, None, PHONE)

    with pytest.raises(HTTPException) as excinfo:
        request_code(db_session, None, PHONE)

    assert excinfo.value.status_code == 429


def test_verify_code_uses_newest_matching_row(db_session):
    now = datetime.utcnow()
    older = PhoneVerification(
        phone=PHONE, code="222222", token="a" * 64,
        created_at=now - timedelta(minutes=5), expires_at=now + timedelta(minutes=5),
    )
    newer = PhoneVerification(
        phone=PHONE, code="222222", token="b" * 64,
        created_at=now - timedelta(minutes=1), expires_at=now + timedelta(minutes=9),
    )
    db_session.add_all([older, newer])
    db_session.commit()

    method = verify_code(db_session, None, PHONE, "222222")
    db_session.commit()

    assert method is VerificationMethod.LOCAL
    assert newer.verified_at is not None
    assert older.verified_at is None
