"""DER building blocks for ECDSA P-256 certificates and signing requests."""

from __future__ import annotations

import base64
from collections.abc import Iterator
from dataclasses import dataclass

SERIAL_NUMBER_LENGTH = 16
AUTHORITY_KEY_ID_LENGTH = 20
PUBLIC_KEY_LENGTH = 64
SIGNATURE_R_LENGTH = 32
SIGNATURE_S_LENGTH = SIGNATURE_R_LENGTH
SIGNATURE_LENGTH = SIGNATURE_R_LENGTH + SIGNATURE_S_LENGTH

ASN1_INTEGER = 0x02
ASN1_BIT_STRING = 0x03
ASN1_NULL = 0x05
ASN1_OBJECT_IDENTIFIER = 0x06
ASN1_PRINTABLE_STRING = 0x13
ASN1_SEQUENCE = 0x30
ASN1_SET = 0x31

ECDSA_WITH_SHA256_OID = bytes(
    [ASN1_OBJECT_IDENTIFIER, 0x08, 0x2A, 0x86, 0x48, 0xCE, 0x3D, 0x04, 0x03, 0x02]
)
AUTHORITY_KEY_ID_OID = bytes([ASN1_OBJECT_IDENTIFIER, 0x03, 0x55, 0x1D, 0x23])
_EC_PUBLIC_KEY_OID = bytes(
    [ASN1_OBJECT_IDENTIFIER, 0x07, 0x2A, 0x86, 0x48, 0xCE, 0x3D, 0x02, 0x01]
)
_PRIME256V1_OID = bytes(
    [ASN1_OBJECT_IDENTIFIER, 0x08, 0x2A, 0x86, 0x48, 0xCE, 0x3D, 0x03, 0x01, 0x07]
)

PUBLIC_KEY_ENCODED_LENGTH = 2 + 2 + 9 + 10 + 4 + PUBLIC_KEY_LENGTH

_NAME_FIELDS = (
    ("country_name", 0x06),
    ("state_province_name", 0x08),
    ("locality_name", 0x07),
    ("organization_name", 0x0A),
    ("organizational_unit_name", 0x0B),
    ("common_name", 0x03),
)


def _check_length(data: bytes, expected: int, what: str) -> bytes:
    data = bytes(data)
    if len(data) != expected:
        raise ValueError(f"{what} must be {expected} bytes, got {len(data)}")
    return data


@dataclass
class CertInfo:
    """Distinguished-name fields of an issuer or subject; empty fields are omitted."""

    country_name: str = ""
    state_province_name: str = ""
    locality_name: str = ""
    organization_name: str = ""
    organizational_unit_name: str = ""
    common_name: str = ""

    def _present(self) -> Iterator[tuple[str, int]]:
        for attribute, type_code in _NAME_FIELDS:
            value = getattr(self, attribute)
            if value:
                yield value, type_code

    def encoded_length(self) -> int:
        """Length of :meth:`encode`'s output, without a sequence header."""
        return sum(11 + len(value.encode("utf-8")) for value, _ in self._present())

    def encode(self) -> bytes:
        """The relative distinguished names, in fixed order, without a header."""
        return b"".join(encode_name(value, code) for value, code in self._present())


def sequence_header_length(length: int) -> int:
    """Size of a SEQUENCE header announcing ``length`` bytes of content."""
    if length > 255:
        return 4
    if length > 127:
        return 3
    return 2


def sequence_header(length: int) -> bytes:
    """A SEQUENCE tag with a DER length for ``length`` content bytes."""
    if length > 255:
        return bytes([ASN1_SEQUENCE, 0x82, (length >> 8) & 0xFF, length & 0xFF])
    if length > 127:
        return bytes([ASN1_SEQUENCE, 0x81, length & 0xFF])
    return bytes([ASN1_SEQUENCE, length & 0xFF])


def encode_version(version: int) -> bytes:
    """A one-byte INTEGER holding ``version``."""
    return bytes([ASN1_INTEGER, 0x01, version & 0xFF])


def encode_name(name: str, type_code: int) -> bytes:
    """One RDN: a SET holding the attribute OID 2.5.4.``type_code`` and a PrintableString."""
    raw = name.encode("utf-8")
    size = len(raw)
    if size + 9 > 0xFF:
        raise ValueError("name is too long to encode")
    return (
        bytes(
            [
                ASN1_SET, size + 9,
                ASN1_SEQUENCE, size + 7,
                ASN1_OBJECT_IDENTIFIER, 0x03, 0x55, 0x04, type_code & 0xFF,
                ASN1_PRINTABLE_STRING, size,
            ]
        )
        + raw
    )


def encode_public_key(public_key: bytes) -> bytes:
    """SubjectPublicKeyInfo for a raw 64-byte uncompressed P-256 point (X || Y)."""
    key = _check_length(public_key, PUBLIC_KEY_LENGTH, "public key")
    return (
        bytes([ASN1_SEQUENCE, (PUBLIC_KEY_ENCODED_LENGTH - 2) & 0xFF, ASN1_SEQUENCE, 0x13])
        + _EC_PUBLIC_KEY_OID
        + _PRIME256V1_OID
        + bytes([ASN1_BIT_STRING, 0x42, 0x00, 0x04])
        + key
    )


def _integer_content(value: bytes) -> bytes:
    """Big-endian unsigned value as DER INTEGER content: no leading zeros, sign-padded."""
    stripped = bytes(value).lstrip(b"\x00")
    if stripped and stripped[0] & 0x80:
        return b"\x00" + stripped
    return stripped


def signature_length(signature: bytes) -> int:
    """Size of :func:`encode_signature`'s output for a raw 64-byte R || S signature."""
    sig = _check_length(signature, SIGNATURE_LENGTH, "signature")
    r = _integer_content(sig[:SIGNATURE_R_LENGTH])
    s = _integer_content(sig[SIGNATURE_R_LENGTH:])
    return 21 + len(r) + len(s)


def encode_signature(signature: bytes) -> bytes:
    """Signature algorithm and BIT STRING wrapping an ECDSA-Sig-Value for R || S."""
    sig = _check_length(signature, SIGNATURE_LENGTH, "signature")
    r = _integer_content(sig[:SIGNATURE_R_LENGTH])
    s = _integer_content(sig[SIGNATURE_R_LENGTH:])
    body = len(r) + len(s)
    return (
        ecdsa_with_sha256()
        + bytes([ASN1_BIT_STRING, body + 7, 0x00, ASN1_SEQUENCE, body + 4])
        + bytes([ASN1_INTEGER, len(r)])
        + r
        + bytes([ASN1_INTEGER, len(s)])
        + s
    )


def serial_number_length(serial_number: bytes) -> int:
    """Size of :func:`encode_serial_number`'s output."""
    return 2 + len(_integer_content(serial_number))


def encode_serial_number(serial_number: bytes) -> bytes:
    """A positive INTEGER from big-endian serial number bytes."""
    content = _integer_content(serial_number)
    return bytes([ASN1_INTEGER, len(content)]) + content


def encode_date(year: int, month: int, day: int, hour: int, minute: int, second: int) -> bytes:
    """UTCTime up to 2049, GeneralizedTime after, always in UTC."""
    tail = f"{month:02d}{day:02d}{hour:02d}{minute:02d}{second:02d}Z"
    if year > 2049:
        return bytes([0x18, 0x0F]) + f"{year:04d}{tail}".encode("ascii")
    return bytes([0x17, 0x0D]) + f"{year - 2000:02d}{tail}".encode("ascii")


def ecdsa_with_sha256() -> bytes:
    """AlgorithmIdentifier for ecdsa-with-SHA256."""
    return bytes([ASN1_SEQUENCE, 0x0A]) + ECDSA_WITH_SHA256_OID


def authority_key_id_length(authority_key_id: bytes) -> int:
    """Size of the extension block, or 0 when the identifier is all zeros."""
    key_id = bytes(authority_key_id)
    return len(key_id) + 17 if any(key_id) else 0


def encode_authority_key_id(authority_key_id: bytes) -> bytes:
    """The [3] extensions block holding an authorityKeyIdentifier extension."""
    key_id = _check_length(authority_key_id, AUTHORITY_KEY_ID_LENGTH, "authority key id")
    return (
        bytes([0xA3, 0x23, ASN1_SEQUENCE, 0x21, ASN1_SEQUENCE, 0x1F])
        + AUTHORITY_KEY_ID_OID
        + bytes([0x04, 0x18, ASN1_SEQUENCE, 0x16, 0x80, 0x14])
        + key_id
    )


def pem_encode(data: bytes, prefix: str = "", suffix: str = "") -> str:
    """Base64 text wrapped at 76 characters between ``prefix`` and ``suffix``."""
    encoded = base64.b64encode(bytes(data)).decode("ascii")
    lines = [encoded[start:start + 76] for start in range(0, len(encoded), 76)]
    return (prefix or "") + "\n".join(lines) + (suffix or "")