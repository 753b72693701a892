import base58
import pytest

from identity_server.core.crypto import (
    CHALLENGE_PREFIX,
    build_challenge_message,
    canonical_wallet_key,
    decode_public_key,
    decode_signature,
    extract_nonce,
    generate_nonce,
    is_valid_wallet_key,
    verify_detached,
)
from identity_server.core.exceptions import DecodeError, InvalidIdentity


def test_nonce_is_128_bit_hex_and_unique():
    nonces = {generate_nonce() for _ in range(100)}
    assert len(nonces) == 100
    for nonce in nonces:
        assert len(nonce) == 32
        int(nonce, 16)


def test_challenge_message_round_trip():
    nonce = generate_nonce()
    message = build_challenge_message(nonce)
    assert message == f"{CHALLENGE_PREFIX}{nonce}"
    assert extract_nonce(message) == nonce
    assert extract_nonce("hello world") is None


def test_canonical_wallet_key(wallet):
    assert canonical_wallet_key(f"  {wallet.address} ") == wallet.address
    assert is_valid_wallet_key(wallet.address)


@pytest.mark.parametrize("value", ["", "not-base58-0OIl", base58.b58encode(b"short").decode()])
def test_malformed_wallet_keys_are_rejected(value):
    assert not is_valid_wallet_key(value)
    with pytest.raises(InvalidIdentity):
        canonical_wallet_key(value)


def test_decode_errors_for_bad_lengths(wallet):
    with pytest.raises(DecodeError):
        decode_public_key(base58.b58encode(b"x" * 31).decode())
    with pytest.raises(DecodeError):
        decode_signature(base58.b58encode(b"x" * 63).decode())
    with pytest.raises(DecodeError):
        decode_signature("")
    assert len(decode_public_key(wallet.address)) == 32


def test_verify_detached(wallet, make_wallet):
    message = build_challenge_message(generate_nonce())
    signature = decode_signature(wallet.sign(message))
    public_key = decode_public_key(wallet.address)

    assert verify_detached(message.encode(), signature, public_key)
    assert not verify_detached(b"other message", signature, public_key)
    assert not verify_detached(message.encode(), signature, decode_public_key(make_wallet().address))
