from datetime import datetime, timedelta, timezone

from tokens import (
    CONFIRM,
    generate_confirmation_token,
    generate_unsubscribe_token,
    issue_token,
    verify_confirmation_token,
    verify_unsubscribe_token,
)

SECRET = "confirmation-secret-for-tests"


def test_confirmation_round_trip():
    issued = generate_confirmation_token(SECRET, "Grace@Hopper.net")
    claims = verify_confirmation_token(SECRET, issued.token)
    assert claims.email == "grace@hopper.net"
    assert claims.token_id == issued.token_id


def test_tokens_are_unique():
    assert generate_confirmation_token(SECRET, "a@hopper.net").token_id != generate_confirmation_token(
        SECRET, "a@hopper.net"
    ).token_id


def test_wrong_secret_or_tampering_fails():
    token = generate_confirmation_token(SECRET, "grace@hopper.net").token
    assert verify_confirmation_token("another-secret-value", token) is None
    header, payload, signature = token.split(".")
    assert verify_confirmation_token(SECRET, ".".join([header, payload, signature[::-1]])) is None
    assert verify_confirmation_token(SECRET, "") is None


def test_expired_confirmation_fails():
    issued_at = datetime.now(timezone.utc) - timedelta(hours=49)
    token = issue_token(SECRET, "grace@hopper.net", CONFIRM, now=issued_at).token
    assert verify_confirmation_token(SECRET, token) is None


def test_purpose_is_checked():
    unsubscribe = generate_unsubscribe_token(SECRET, "grace@hopper.net")
    assert verify_confirmation_token(SECRET, unsubscribe) is None
    confirm = generate_confirmation_token(SECRET, "grace@hopper.net").token
    assert not verify_unsubscribe_token(SECRET, "grace@hopper.net", confirm)


def test_unsubscribe_token_is_bound_to_email():
    token = generate_unsubscribe_token(SECRET, "grace@hopper.net")
    assert verify_unsubscribe_token(SECRET, "Grace@Hopper.net", token)
    assert not verify_unsubscribe_token(SECRET, "ada@lovelace.org", token)
