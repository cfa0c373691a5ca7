"""
Self-signed TLS certificate for serving the web UI over HTTPS.
"""

from datetime import datetime, timedelta, timezone

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from hostinfo.utils.logger import logger


def generate_self_signed_cert(cert_dir, common_name="localhost", valid_days=365):
    """
    Generate a self-signed certificate unless one already exists.

    Args:
        cert_dir: Directory receiving cert.pem and key.pem
        common_name: Certificate subject common name
        valid_days: Validity period in days

    Returns:
        tuple: (cert_file, key_file) as strings
    """
    cert_file = cert_dir / 'cert.pem'
    key_file = cert_dir / 'key.pem'

    if cert_file.exists() and key_file.exists():
        return str(cert_file), str(key_file)

    cert_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Generating self-signed SSL certificate...")

    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048,
    )

    subject = issuer = x509.Name([
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "hostinfo-web"),
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
    ])

    now = datetime.now(timezone.utc)
    cert = x509.CertificateBuilder().subject_name(
        subject
    ).issuer_name(
        issuer
    ).public_key(
        private_key.public_key()
    ).serial_number(
        x509.random_serial_number()
    ).not_valid_before(
        now
    ).not_valid_after(
        now + timedelta(days=valid_days)
    ).add_extension(
        x509.SubjectAlternativeName([x509.DNSName(common_name)]),
        critical=False,
    ).sign(private_key, hashes.SHA256())

    with open(cert_file, "wb") as f:
        f.write(cert.public_bytes(serialization.Encoding.PEM))

    with open(key_file, "wb") as f:
        f.write(private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption()
        ))
    try:
        key_file.chmod(0o600)
    except OSError:
        logger.warning(f"Could not restrict permissions on {key_file}")

    logger.info(f"SSL certificate generated: {cert_file}")
    return str(cert_file), str(key_file)
