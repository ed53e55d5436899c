"""Self-signed TLS certificate generation for the manager.

Produces the key/certificate pair the manager's listener serves to
collectors. There is no CA: the certificate is signed with its own key and
trust is established out-of-band, by copying the certificate (or its
fingerprint) to the collectors.

Certificate profile:
- Serial: random 128-bit positive integer
- Subject and issuer: O=WHIDS Manager
- Validity: [now, now + 365 days]
- KeyUsage: digitalSignature, keyEncipherment (critical)
- ExtendedKeyUsage: serverAuth
- BasicConstraints: CA=false (critical)
- SubjectAlternativeName: IP literals as IPAddress, anything else as DNSName

Files are written in order cert.pem then key.pem, both owner-only (0600).
A failure writing key.pem leaves cert.pem in place.
"""

from __future__ import annotations

__all__ = [
    "CertificateBundle",
    "ECKey",
    "KeyAlgorithm",
    "PrivateKey",
    "RSAKey",
    "build_self_signed_certificate",
    "classify_hosts",
    "generate_private_key",
    "generate_self_signed",
    "generate_serial_number",
    "write_key_pair",
]

import ipaddress
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import ClassVar, Iterable, Literal, Union

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from whids_manager.constants import (
    CERT_FILENAME,
    CERT_VALIDITY_DAYS,
    DEFAULT_ORGANIZATION,
    KEY_FILENAME,
    RSA_KEY_SIZE,
    RSA_PUBLIC_EXPONENT,
    SERIAL_NUMBER_BITS,
)
from whids_manager.exceptions import CertGenError, KeyMarshalError
from whids_manager.manager.log_config import log_event
from whids_manager.manager.models import ManagerSystemEvent
from whids_manager.utils.file_helpers import write_secure_file

KeyAlgorithm = Literal["rsa", "ecdsa"]

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


# =============================================================================
# Private Key Variants
# =============================================================================


def _traditional_pem(key: rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey) -> bytes:
    """Encode a private key in its algorithm's traditional format (PKCS#1 / SEC1)."""
    try:
        return key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyMarshalError(f"Unable to marshal private key: {e}", step="marshal") from e


@dataclass(frozen=True)
class RSAKey:
    """RSA private key, encoded as PKCS#1."""

    key: rsa.RSAPrivateKey
    pem_label: ClassVar[str] = "RSA PRIVATE KEY"

    def public_key(self) -> rsa.RSAPublicKey:
        return self.key.public_key()

    def to_pem(self) -> bytes:
        """Encode the key as a PEM block labeled RSA PRIVATE KEY.

        Raises:
            KeyMarshalError: If the key cannot be encoded.
        """
        return _traditional_pem(self.key)


@dataclass(frozen=True)
class ECKey:
    """Elliptic-curve private key, encoded as SEC1."""

    key: ec.EllipticCurvePrivateKey
    pem_label: ClassVar[str] = "EC PRIVATE KEY"

    def public_key(self) -> ec.EllipticCurvePublicKey:
        return self.key.public_key()

    def to_pem(self) -> bytes:
        """Encode the key as a PEM block labeled EC PRIVATE KEY.

        Raises:
            KeyMarshalError: If the key cannot be encoded.
        """
        return _traditional_pem(self.key)


PrivateKey = Union[RSAKey, ECKey]


def generate_private_key(algorithm: KeyAlgorithm = "rsa") -> PrivateKey:
    """Generate a fresh private key.

    Args:
        algorithm: "rsa" for RSA-4096, "ecdsa" for ECDSA over P-256.

    Returns:
        The key wrapped in its variant.

    Raises:
        CertGenError: If the algorithm is unknown or generation fails.
    """
    try:
        if algorithm == "rsa":
            return RSAKey(
                rsa.generate_private_key(public_exponent=RSA_PUBLIC_EXPONENT, key_size=RSA_KEY_SIZE)
            )
        if algorithm == "ecdsa":
            return ECKey(ec.generate_private_key(ec.SECP256R1()))
    except (ValueError, UnsupportedAlgorithm) as e:
        raise CertGenError(f"Failed to generate private key: {e}", step="keygen") from e
    raise CertGenError(f"Unsupported key algorithm: {algorithm!r}", step="keygen")


# =============================================================================
# Certificate Construction
# =============================================================================


def classify_hosts(hosts: Iterable[str]) -> tuple[list[IPAddress], list[str]]:
    """Split hosts into IP literals and DNS names.

    A host is an IP entry iff it parses as an IPv4 or IPv6 address.
    Surrounding whitespace is stripped, blank entries are skipped, and
    duplicates are dropped keeping first-seen order.

    Args:
        hosts: Host strings, e.g. ["10.0.0.5", "manager.internal"].

    Returns:
        Tuple of (IP addresses, DNS names).
    """
    ips: list[IPAddress] = []
    names: list[str] = []

    for raw in hosts:
        host = raw.strip()
        if not host:
            continue
        try:
            ip = ipaddress.ip_address(host)
        except ValueError:
            if host not in names:
                names.append(host)
            continue
        if ip not in ips:
            ips.append(ip)

    return ips, names


def generate_serial_number() -> int:
    """Return a random serial number in [1, 2**128)."""
    return secrets.randbelow((1 << SERIAL_NUMBER_BITS) - 1) + 1


def build_self_signed_certificate(
    private_key: PrivateKey,
    hosts: Iterable[str],
    *,
    now: datetime | None = None,
    organization: str = DEFAULT_ORGANIZATION,
    validity: timedelta = timedelta(days=CERT_VALIDITY_DAYS),
) -> x509.Certificate:
    """Build and sign a server certificate with its own key.

    Args:
        private_key: Key that both certifies and signs.
        hosts: Hosts the certificate is valid for.
        now: Start of the validity window (default: current UTC time).
        organization: Subject organization name.
        validity: Length of the validity window.

    Returns:
        The signed certificate.

    Raises:
        CertGenError: If no usable host is given or signing fails.
    """
    ips, names = classify_hosts(hosts)
    if not ips and not names:
        raise CertGenError("Missing required host: no host to issue the certificate for", step="hosts")

    not_before = now or datetime.now(timezone.utc)
    not_after = not_before + validity
    name = x509.Name([x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization)])

    try:
        san = x509.SubjectAlternativeName(
            [x509.IPAddress(ip) for ip in ips] + [x509.DNSName(dns) for dns in names]
        )
        builder = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(private_key.public_key())
            .serial_number(generate_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    content_commitment=False,
                    key_encipherment=True,
                    data_encipherment=False,
                    key_agreement=False,
                    key_cert_sign=False,
                    crl_sign=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)
            .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
            .add_extension(san, critical=False)
        )
        return builder.sign(private_key.key, hashes.SHA256())
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise CertGenError(f"Failed to create certificate: {e}", step="sign") from e


# =============================================================================
# Persistence
# =============================================================================


@dataclass(frozen=True)
class CertificateBundle:
    """Generated certificate and key, and where they were written."""

    certificate: x509.Certificate
    private_key: PrivateKey
    cert_path: Path
    key_path: Path

    @property
    def fingerprint(self) -> str:
        """SHA-256 fingerprint of the certificate, colon-separated hex."""
        return self.certificate.fingerprint(hashes.SHA256()).hex(":").upper()


def write_key_pair(
    certificate: x509.Certificate,
    private_key: PrivateKey,
    output_dir: Path | str = ".",
) -> tuple[Path, Path]:
    """Write cert.pem then key.pem with owner-only permissions.

    Both blocks are encoded before anything touches the disk, so an encoding
    failure writes nothing. An I/O failure on key.pem leaves cert.pem behind.

    Args:
        certificate: Certificate to write.
        private_key: Matching private key.
        output_dir: Directory to write into.

    Returns:
        Tuple of (certificate path, key path).

    Raises:
        KeyMarshalError: If the private key cannot be encoded.
        CertGenError: If a file cannot be written.
    """
    directory = Path(output_dir)
    cert_path = directory / CERT_FILENAME
    key_path = directory / KEY_FILENAME

    cert_pem = certificate.public_bytes(serialization.Encoding.PEM)
    key_pem = private_key.to_pem()

    for path, data, event in (
        (cert_path, cert_pem, "cert_written"),
        (key_path, key_pem, "key_written"),
    ):
        try:
            write_secure_file(path, data)
        except OSError as e:
            raise CertGenError(f"Failed to write {path}: {e}", step="write", path=path) from e
        log_event(
            logging.INFO,
            ManagerSystemEvent(event=event, message=f"Written {path}", path=str(path)),
        )

    return cert_path, key_path


def generate_self_signed(
    hosts: Iterable[str],
    output_dir: Path | str = ".",
    key_algorithm: KeyAlgorithm = "rsa",
) -> CertificateBundle:
    """Generate a key pair and a self-signed certificate, and write both.

    Args:
        hosts: Hosts (IP literals or DNS names) the certificate is valid for.
        output_dir: Directory receiving cert.pem and key.pem.
        key_algorithm: "rsa" (default, RSA-4096) or "ecdsa" (P-256).

    Returns:
        CertificateBundle describing what was written.

    Raises:
        CertGenError: If hosts is empty, or generation, signing, or writing fails.
        KeyMarshalError: If the private key cannot be encoded.
    """
    host_list = [h for h in hosts if h.strip()]
    if not host_list:
        raise CertGenError("Missing required host: no host to issue the certificate for", step="hosts")

    private_key = generate_private_key(key_algorithm)
    certificate = build_self_signed_certificate(private_key, host_list)
    cert_path, key_path = write_key_pair(certificate, private_key, output_dir)

    return CertificateBundle(
        certificate=certificate,
        private_key=private_key,
        cert_path=cert_path,
        key_path=key_path,
    )
