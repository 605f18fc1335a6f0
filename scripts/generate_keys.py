#!/usr/bin/env python3
"""
Generate RSA key pairs and self-signed certificates for iDEAL/iDIN testing.

The merchant key signs outgoing requests (and doubles as the TLS client
identity); the acquirer key is used by the mock acquirer to sign its
responses. Both are saved to the config/keys directory.

Usage:
    python scripts/generate_keys.py
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID


def generate_certificate(
    output_dir: Path,
    name: str,
    common_name: str,
    key_size: int = 2048,
    valid_days: int = 5 * 365,
) -> tuple[str, str, str]:
    """
    Generate an RSA key pair with a self-signed certificate and save both.

    Returns:
        Tuple of (private_key_path, certificate_path, thumbprint)
    """
    # Create output directory
    output_dir.mkdir(parents=True, exist_ok=True)

    # Generate key pair
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)

    subject = x509.Name([
        x509.NameAttribute(NameOID.COUNTRY_NAME, "NL"),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "iDEAL/iDIN test"),
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
    ])
    now = datetime.now(timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=5))
        .not_valid_after(now + timedelta(days=valid_days))
        .sign(private_key, hashes.SHA256())
    )

    # Serialize private key
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )

    # Save key and certificate
    private_path = output_dir / f"{name}_private.pem"
    certificate_path = output_dir / f"{name}_certificate.pem"

    with open(private_path, "wb") as f:
        f.write(private_pem)
    os.chmod(private_path, 0o600)  # Restrict permissions

    with open(certificate_path, "wb") as f:
        f.write(certificate.public_bytes(serialization.Encoding.PEM))

    thumbprint = certificate.fingerprint(hashes.SHA1()).hex().upper()
    return str(private_path), str(certificate_path), thumbprint


def main():
    # Determine project root
    script_dir = Path(__file__).parent
    project_root = script_dir.parent
    keys_dir = project_root / "config" / "keys"

    print("=" * 60)
    print("iDEAL/iDIN Key Generator")
    print("=" * 60)

    # Check if keys already exist
    if (keys_dir / "merchant_private.pem").exists():
        response = input("\nKeys already exist. Overwrite? [y/N]: ")
        if response.lower() != "y":
            print("Aborted.")
            sys.exit(0)

    print("\n1. Generating merchant key pair and certificate...")
    merchant_key, merchant_cert, merchant_thumbprint = generate_certificate(
        keys_dir, "merchant", "merchant.example.nl"
    )
    print(f"   Private key: {merchant_key}")
    print(f"   Certificate: {merchant_cert}")
    print(f"   KeyName:     {merchant_thumbprint}")

    print("\n2. Generating mock acquirer key pair and certificate...")
    acquirer_key, acquirer_cert, _ = generate_certificate(
        keys_dir, "acquirer", "acquirer.example.nl"
    )
    print(f"   Private key: {acquirer_key}")
    print(f"   Certificate: {acquirer_cert}")

    print("\n" + "=" * 60)
    print("SETUP INSTRUCTIONS")
    print("=" * 60)

    print("\n1. Update your .env file:")
    print(f"   IDX_PRIVATE_KEY_PATH={merchant_key}")
    print(f"   IDX_CERTIFICATE_PATH={merchant_cert}")
    print(f"   IDX_ACQUIRER_CERTIFICATE_PATH={acquirer_cert}")

    print("\n2. For the mock acquirer:")
    print(f"   MOCK_ACQUIRER_PRIVATE_KEY_PATH={acquirer_key}")
    print(f"   MOCK_ACQUIRER_CERTIFICATE_PATH={acquirer_cert}")
    print(f"   MOCK_ACQUIRER_MERCHANT_CERTIFICATE_PATH={merchant_cert}")

    print("\n3. Upload the merchant certificate in your bank's dashboard")
    print("   and download the acquirer certificate from it")

    print("\n" + "=" * 60)
    print("Keys generated successfully!")
    print("=" * 60)


if __name__ == "__main__":
    main()
