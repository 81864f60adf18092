"""Build, sign and import ECDSA P-256 certificates and signing requests."""

from __future__ import annotations

from .der import (
    AUTHORITY_KEY_ID_LENGTH,
    AUTHORITY_KEY_ID_OID,
    ECDSA_WITH_SHA256_OID,
    PUBLIC_KEY_LENGTH,
    SERIAL_NUMBER_LENGTH,
    SIGNATURE_LENGTH,
    SIGNATURE_R_LENGTH,
    SIGNATURE_S_LENGTH,
    ASN1_SEQUENCE,
    CertInfo,
    authority_key_id_length,
    ecdsa_with_sha256,
    encode_authority_key_id,
    encode_date,
    encode_public_key,
    encode_serial_number,
    encode_signature,
    encode_version,
    pem_encode,
    sequence_header,
)

CSR_PEM_PREFIX = "-----BEGIN CERTIFICATE REQUEST-----\n"
CSR_PEM_SUFFIX = "\n-----END CERTIFICATE REQUEST-----\n"
CERT_PEM_PREFIX = "-----BEGIN CERTIFICATE-----\n"
CERT_PEM_SUFFIX = "\n-----END CERTIFICATE-----\n"

_CERT_VERSION_V3 = bytes([0xA0, 0x03, 0x02, 0x01, 0x02])
_EMPTY_EXTENSIONS = bytes([0xA3, 0x02, ASN1_SEQUENCE, 0x00])
_CSR_ATTRIBUTES_END = bytes([0xA0, 0x00])
_DATES_LENGTH = 3
_UNUSED_LENGTH = 5


class CertificateError(ValueError):
    """Raised when a certificate cannot be built, signed or imported."""


def _exact(data: bytes, expected: int, what: str) -> bytes:
    data = bytes(data)
    if len(data) != expected:
        raise CertificateError(f"{what} must be {expected} bytes, got {len(data)}")
    return data


class ECP256Certificate:
    """A certificate or CSR for a P-256 key, with compact storage of the
    values needed to rebuild it: signature, packed dates, serial number and
    authority key identifier.

    Fill in :attr:`issuer` and :attr:`subject`, the dates and the keys, then
    call :meth:`build_csr` / :meth:`sign_csr` or :meth:`build_cert` /
    :meth:`sign_cert`.
    """

    def __init__(self) -> None:
        self.issuer = CertInfo()
        self.subject = CertInfo()
        self._signature = bytes(SIGNATURE_LENGTH)
        self._dates = bytearray(_DATES_LENGTH)
        self._serial_number = bytes(SERIAL_NUMBER_LENGTH)
        self._authority_key_id = bytes(AUTHORITY_KEY_ID_LENGTH)
        self._public_key: bytes | None = None
        self._tbs: bytes | None = None
        self._der = b""

    # Packed dates: 5 bits year-2000, 4 bits month, 5 bits day, 5 bits hour,
    # 5 bits validity in years.

    @property
    def issue_year(self) -> int:
        return (self._dates[0] >> 3) + 2000

    @issue_year.setter
    def issue_year(self, year: int) -> None:
        self._dates[0] = (self._dates[0] & 0x07) | (((year - 2000) << 3) & 0xFF)

    @property
    def issue_month(self) -> int:
        return ((self._dates[0] & 0x07) << 1) | (self._dates[1] >> 7)

    @issue_month.setter
    def issue_month(self, month: int) -> None:
        self._dates[0] = (self._dates[0] & 0xF8) | ((month >> 1) & 0xFF)
        self._dates[1] = (self._dates[1] & 0x7F) | ((month << 7) & 0xFF)

    @property
    def issue_day(self) -> int:
        return (self._dates[1] & 0x7C) >> 2

    @issue_day.setter
    def issue_day(self, day: int) -> None:
        self._dates[1] = (self._dates[1] & 0x83) | ((day << 2) & 0xFF)

    @property
    def issue_hour(self) -> int:
        return ((self._dates[1] & 0x03) << 3) | (self._dates[2] >> 5)

    @issue_hour.setter
    def issue_hour(self, hour: int) -> None:
        self._dates[2] = (self._dates[2] & 0x1F) | ((hour << 5) & 0xFF)
        self._dates[1] = (self._dates[1] & 0xFC) | ((hour >> 3) & 0xFF)

    @property
    def expire_years(self) -> int:
        return self._dates[2] & 0x1F

    @expire_years.setter
    def expire_years(self, years: int) -> None:
        self._dates[2] = (self._dates[2] & 0xE0) | (years & 0xFF)

    @property
    def serial_number(self) -> bytes:
        return self._serial_number

    @property
    def authority_key_id(self) -> bytes:
        return self._authority_key_id

    @property
    def signature(self) -> bytes:
        return self._signature

    @property
    def public_key(self) -> bytes | None:
        return self._public_key

    @property
    def compressed(self) -> bytes:
        """Signature, packed dates, padding, serial number and authority key id."""
        return (
            self._signature
            + bytes(self._dates)
            + bytes(_UNUSED_LENGTH)
            + self._serial_number
            + self._authority_key_id
        )

    @property
    def der(self) -> bytes:
        """The DER bytes last built, signed or imported."""
        return self._der

    def set_serial_number(self, serial_number: bytes) -> None:
        self._serial_number = _exact(serial_number, SERIAL_NUMBER_LENGTH, "serial number")

    def set_authority_key_id(self, authority_key_id: bytes) -> None:
        self._authority_key_id = _exact(
            authority_key_id, AUTHORITY_KEY_ID_LENGTH, "authority key id"
        )

    def set_public_key(self, public_key: bytes) -> None:
        """Raw uncompressed X || Y coordinates, 64 bytes."""
        self._public_key = _exact(public_key, PUBLIC_KEY_LENGTH, "public key")

    def set_signature(self, signature: bytes) -> None:
        """Raw R || S signature, 64 bytes."""
        self._signature = _exact(signature, SIGNATURE_LENGTH, "signature")

    def _require_public_key(self) -> bytes:
        if self._public_key is None:
            raise CertificateError("no public key set")
        return self._public_key

    @staticmethod
    def _name_block(info: CertInfo) -> bytes:
        return sequence_header(info.encoded_length()) + info.encode()

    def build_csr(self) -> bytes:
        """Build the unsigned CertificationRequestInfo and return it."""
        public_key = self._require_public_key()
        info = (
            encode_version(0)
            + self._name_block(self.subject)
            + encode_public_key(public_key)
            + _CSR_ATTRIBUTES_END
        )
        self._tbs = sequence_header(len(info)) + info
        self._der = self._tbs
        return self._der

    def _sign(self, signature: bytes) -> bytes:
        if self._tbs is None:
            raise CertificateError("nothing has been built to sign")
        signature = _exact(signature, SIGNATURE_LENGTH, "signature")
        body = self._tbs + encode_signature(signature)
        self._der = sequence_header(len(body)) + body
        return self._der

    def sign_csr(self, signature: bytes) -> bytes:
        """Wrap the built request with ``signature`` and return the DER."""
        return self._sign(signature)

    def csr_pem(self) -> str:
        if not self._der:
            raise CertificateError("no request has been built")
        return pem_encode(self._der, CSR_PEM_PREFIX, CSR_PEM_SUFFIX)

    def _validity(self) -> bytes:
        year = self.issue_year
        month, day, hour = self.issue_month, self.issue_day, self.issue_hour
        not_before = encode_date(year, month, day, hour, 0, 0)
        not_after = encode_date(year + self.expire_years, month, day, hour, 0, 0)
        return sequence_header(len(not_before) + len(not_after)) + not_before + not_after

    def build_cert(self) -> bytes:
        """Build the unsigned TBSCertificate and return it."""
        public_key = self._require_public_key()
        if authority_key_id_length(self._authority_key_id):
            extensions = encode_authority_key_id(self._authority_key_id)
        else:
            extensions = _EMPTY_EXTENSIONS
        info = (
            _CERT_VERSION_V3
            + encode_serial_number(self._serial_number)
            + ecdsa_with_sha256()
            + self._name_block(self.issuer)
            + self._validity()
            + self._name_block(self.subject)
            + encode_public_key(public_key)
            + extensions
        )
        self._tbs = sequence_header(len(info)) + info
        self._der = self._tbs
        return self._der

    def sign_cert(self, signature: bytes | None = None) -> bytes:
        """Wrap the built certificate with ``signature``, or the stored one."""
        return self._sign(self._signature if signature is None else signature)

    def cert_pem(self) -> str:
        if not self._der:
            raise CertificateError("no certificate has been built")
        return pem_encode(self._der, CERT_PEM_PREFIX, CERT_PEM_SUFFIX)

    def import_cert(self, cert_der: bytes) -> None:
        """Take a DER certificate and pick out its authority key id and signature."""
        data = bytes(cert_der)
        key_id_at = data.find(AUTHORITY_KEY_ID_OID)
        if key_id_at < 0:
            raise CertificateError("certificate has no authority key identifier")
        start = key_id_at + 11
        authority_key_id = data[start:start + AUTHORITY_KEY_ID_LENGTH]
        if len(authority_key_id) != AUTHORITY_KEY_ID_LENGTH:
            raise CertificateError("truncated authority key identifier")
        try:
            signature = self._extract_signature(data, key_id_at)
        except IndexError as exc:
            raise CertificateError("truncated signature") from exc
        self._der = data
        self._tbs = None
        self._authority_key_id = authority_key_id
        self._signature = signature

    @staticmethod
    def _extract_signature(data: bytes, search_from: int) -> bytes:
        algorithm_at = data.find(ECDSA_WITH_SHA256_OID, search_from)
        if algorithm_at < 0:
            raise CertificateError("certificate has no signature algorithm")
        pos = algorithm_at + len(ECDSA_WITH_SHA256_OID)
        if data[pos] != 0x03:
            raise CertificateError("signature is not a bit string")
        # Skip BIT STRING tag, length, unused-bits byte, SEQUENCE tag and length.
        pos += 5
        parts = []
        for expected in (SIGNATURE_R_LENGTH, SIGNATURE_S_LENGTH):
            padded = data[pos] == 0x02 and data[pos + 1] == 0x21 and data[pos + 2] == 0x00
            padding = 1 if padded else 0
            size = data[pos + 1] - padding
            pos += 2 + padding
            if size != expected:
                raise CertificateError("unexpected signature component length")
            value = data[pos:pos + size]
            if len(value) != size:
                raise IndexError("signature component runs past the end")
            parts.append(value)
            pos += size
        return b"".join(parts)