from __future__ import annotations

import base64
import binascii

from accountguard.contexts.two_factor.domain.value_objects import CredentialEncoding


def encode_credential_bytes(*, raw: bytes, encoding: CredentialEncoding) -> str:
    """
    Encode raw credential bytes as padded RFC 4648 BASE32 or BASE64 text.

    Args:
        raw: Raw bytes to encode.
        encoding: Target text encoding.
    Returns:
        str: ASCII text with `=` padding preserved.
    Assumptions:
        None.
    Raises:
        ValueError: If `raw` is empty.
    Side Effects:
        None.
    """
    if not raw:
        raise ValueError("credential bytes must be non-empty")
    if encoding is CredentialEncoding.BASE32:
        return base64.b32encode(raw).decode("ascii")
    return base64.b64encode(raw).decode("ascii")


def decode_credential_text(*, text: str, encoding: CredentialEncoding) -> bytes:
    """
    Decode stored credential text back into raw key bytes.

    Args:
        text: BASE32 or BASE64 text, padding optional.
        encoding: Encoding the text was produced with.
    Returns:
        bytes: Decoded raw bytes.
    Assumptions:
        BASE32 input is case-insensitive; missing padding is restored locally.
    Raises:
        ValueError: If text is empty or not valid for the encoding.
    Side Effects:
        None.
    """
    normalized = text.strip()
    if not normalized:
        raise ValueError("credential text must be non-empty")
    try:
        if encoding is CredentialEncoding.BASE32:
            padding = "=" * ((8 - (len(normalized) % 8)) % 8)
            return base64.b32decode(f"{normalized}{padding}", casefold=True)
        padding = "=" * ((4 - (len(normalized) % 4)) % 4)
        return base64.b64decode(f"{normalized}{padding}", validate=True)
    except (binascii.Error, ValueError) as error:
        raise ValueError(f"credential text is not valid {encoding.value}") from error
