import base64

import pytest

from sketchkit.certificate import CertificateError, ECP256Certificate
from sketchkit.der import AUTHORITY_KEY_ID_OID, ECDSA_WITH_SHA256_OID

PUBLIC_KEY = bytes(range(1, 65))
SERIAL = bytes(range(0x10, 0x20))
AKI = bytes(range(0x40, 0x54))
SIG_LOW = bytes([0x11] * 32 + [0x22] * 32)
SIG_HIGH = bytes([0x91] * 32 + [0xA2] * 32)


def _outer_length(der):
    if der[1] == 0x82:
        return 4, (der[2] << 8) | der[3]
    if der[1] == 0x81:
        return 3, der[2]
    return 2, der[1]


def _cert(aki=AKI):
    cert = ECP256Certificate()
    cert.issuer.common_name = "Example CA"
    cert.issuer.organization_name = "Example"
    cert.subject.common_name = "device"
    cert.issue_year = 2024
    cert.issue_month = 5
    cert.issue_day = 17
    cert.issue_hour = 9
    cert.expire_years = 20
    cert.set_serial_number(SERIAL)
    if aki is not None:
        cert.set_authority_key_id(aki)
    cert.set_public_key(PUBLIC_KEY)
    return cert


def test_date_fields_round_trip():
    cert = _cert()
    assert (cert.issue_year, cert.issue_month, cert.issue_day,
            cert.issue_hour, cert.expire_years) == (2024, 5, 17, 9, 20)


def test_date_fields_do_not_disturb_each_other():
    cert = ECP256Certificate()
    cert.issue_hour = 31
    cert.issue_month = 15
    cert.issue_day = 31
    cert.expire_years = 31
    cert.issue_year = 2031
    assert (cert.issue_year, cert.issue_month, cert.issue_day,
            cert.issue_hour, cert.expire_years) == (2031, 15, 31, 31, 31)


def test_build_csr_structure():
    cert = ECP256Certificate()
    cert.subject.common_name = "device"
    cert.set_public_key(PUBLIC_KEY)
    der = cert.build_csr()
    header, length = _outer_length(der)
    assert header + length == len(der)
    assert der[header:header + 3] == bytes([0x02, 0x01, 0x00])
    assert der.endswith(PUBLIC_KEY + bytes([0xA0, 0x00]))
    assert b"device" in der
    assert cert.der == der


def test_sign_csr_wraps_info_and_signature():
    cert = ECP256Certificate()
    cert.subject.common_name = "device"
    cert.set_public_key(PUBLIC_KEY)
    info = cert.build_csr()
    signed = cert.sign_csr(SIG_LOW)
    header, length = _outer_length(signed)
    assert header + length == len(signed)
    assert signed[header:header + len(info)] == info
    assert ECDSA_WITH_SHA256_OID in signed[header + len(info):]
    assert signed.endswith(bytes([0x22] * 32))


def test_csr_pem_round_trip():
    cert = ECP256Certificate()
    cert.subject.common_name = "device"
    cert.set_public_key(PUBLIC_KEY)
    cert.build_csr()
    der = cert.sign_csr(SIG_HIGH)
    pem = cert.csr_pem()
    assert pem.startswith("-----BEGIN CERTIFICATE REQUEST-----\n")
    assert pem.endswith("\n-----END CERTIFICATE REQUEST-----\n")
    body = pem.splitlines()[1:-1]
    assert all(len(line) <= 76 for line in body)
    assert base64.b64decode("".join(body)) == der


def test_build_cert_structure():
    cert = _cert()
    der = cert.build_cert()
    header, length = _outer_length(der)
    assert header + length == len(der)
    assert der[header:header + 5] == bytes([0xA0, 0x03, 0x02, 0x01, 0x02])
    assert AUTHORITY_KEY_ID_OID in der
    assert der.endswith(AKI)
    assert b"240517090000Z" in der
    assert b"440517090000Z" in der


def test_build_cert_without_authority_key_id_uses_empty_extensions():
    cert = _cert(aki=None)
    der = cert.build_cert()
    assert der.endswith(bytes([0xA3, 0x02, 0x30, 0x00]))
    assert AUTHORITY_KEY_ID_OID not in der


def test_build_cert_uses_generalized_time_after_2049():
    cert = _cert()
    cert.issue_year = 2031
    cert.expire_years = 31
    der = cert.build_cert()
    assert bytes([0x17, 0x0D]) + b"310517090000Z" in der
    assert bytes([0x18, 0x0F]) + b"20620517090000Z" in der


def test_sign_cert_and_import_round_trip():
    cert = _cert()
    cert.build_cert()
    der = cert.sign_cert(SIG_HIGH)
    other = ECP256Certificate()
    other.import_cert(der)
    assert other.authority_key_id == AKI
    assert other.signature == SIG_HIGH
    assert other.der == der


def test_sign_cert_uses_stored_signature():
    cert = _cert()
    cert.set_signature(SIG_LOW)
    cert.build_cert()
    der = cert.sign_cert()
    other = ECP256Certificate()
    other.import_cert(der)
    assert other.signature == SIG_LOW


def test_cert_pem_round_trip():
    cert = _cert()
    cert.build_cert()
    der = cert.sign_cert(SIG_LOW)
    pem = cert.cert_pem()
    assert pem.startswith("-----BEGIN CERTIFICATE-----\n")
    assert pem.endswith("\n-----END CERTIFICATE-----\n")
    assert base64.b64decode("".join(pem.splitlines()[1:-1])) == der


def test_compressed_layout():
    cert = _cert()
    cert.set_signature(SIG_LOW)
    compressed = cert.compressed
    assert len(compressed) == 108
    assert compressed[:64] == SIG_LOW
    assert compressed[72:88] == SERIAL
    assert compressed[88:] == AKI


@pytest.mark.parametrize(
    "setter",
    [
        ECP256Certificate.set_serial_number,
        ECP256Certificate.set_authority_key_id,
        ECP256Certificate.set_public_key,
        ECP256Certificate.set_signature,
    ],
)
def test_wrong_lengths_are_rejected(setter):
    cert = ECP256Certificate()
    before = bytes(cert.compressed)
    with pytest.raises(CertificateError):
        setter(cert, b"\x01\x02\x03")
    assert bytes(cert.compressed) == before


def test_build_without_public_key_fails():
    cert = ECP256Certificate()
    with pytest.raises(CertificateError):
        cert.build_csr()
    with pytest.raises(CertificateError):
        cert.build_cert()


def test_sign_before_build_fails():
    cert = ECP256Certificate()
    with pytest.raises(CertificateError):
        cert.sign_csr(SIG_LOW)


def test_pem_before_build_fails():
    with pytest.raises(CertificateError):
        ECP256Certificate().cert_pem()


def test_import_rejects_certificate_without_authority_key_id():
    cert = _cert(aki=None)
    cert.build_cert()
    der = cert.sign_cert(SIG_LOW)
    with pytest.raises(CertificateError):
        ECP256Certificate().import_cert(der)


def test_import_rejects_truncated_certificate():
    cert = _cert()
    cert.build_cert()
    der = cert.sign_cert(SIG_LOW)
    other = ECP256Certificate()
    with pytest.raises(CertificateError):
        other.import_cert(der[:-40])
    assert other.der == b""