from giftexchange.backend.security import (
    LOCAL_PREFIX,
    generate_local_event_id,
    generate_token,
    is_local_event_id,
    verify_secret,
)


def test_generate_token_returns_non_empty_random_value() -> None:
    first = generate_token()
    second = generate_token()

    assert first
    assert second
    assert first != second


def test_local_event_ids_carry_the_local_prefix() -> None:
    event_id = generate_local_event_id()

    assert event_id.startswith(LOCAL_PREFIX)
    assert is_local_event_id(event_id) is True
    assert generate_local_event_id() != event_id


def test_is_local_event_id_rejects_remote_and_missing_ids() -> None:
    assert is_local_event_id("8f3a2c11") is False
    assert is_local_event_id("") is False
    assert is_local_event_id(None) is False


def test_verify_secret_is_exact_match() -> None:
    assert verify_secret("hunter2", "hunter2") is True
    assert verify_secret("Hunter2", "hunter2") is False
    assert verify_secret("hunter2 ", "hunter2") is False
    assert verify_secret("schlüssel", "schlüssel") is True
    assert verify_secret(None, "hunter2") is False
    assert verify_secret("hunter2", None) is False
