"""
Attestation signing for the local execution backend.

REQUIREMENTS:
- Signatures use Ed25519 (256-bit security level)
- Key IDs are SHA256 hashes of public keys (first 16 chars)
- Verification is offline-capable (no network required)

A signature here only says "this key holder ran the order program and
saw these public values". It is a development stand-in for a succinct
proof and carries none of a zkVM's trust properties.
"""

from __future__ import annotations

import hashlib
from typing import Dict, Optional

from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives import serialization
from cryptography.exceptions import InvalidSignature


def _raw_public_bytes(public_key: Ed25519PublicKey) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def compute_key_id(public_key_bytes: bytes) -> str:
    return hashlib.sha256(public_key_bytes).hexdigest()[:16]


class AttestationSigner:
    """
    Ed25519 signer for execution attestations.

    Usage:
        # From raw key bytes (32 bytes)
        signer = AttestationSigner.from_private_bytes(key_bytes)

        # From PEM file
        signer = AttestationSigner.from_pem_file("/path/to/key.pem")

        # Generate new key (for testing and ephemeral dev servers)
        signer = AttestationSigner.generate()
    """

    def __init__(self, private_key: Ed25519PrivateKey):
        self._private_key = private_key
        self._public_key = private_key.public_key()
        self._key_id = compute_key_id(_raw_public_bytes(self._public_key))

    @property
    def key_id(self) -> str:
        return self._key_id

    @property
    def public_key_bytes(self) -> bytes:
        return _raw_public_bytes(self._public_key)

    def sign(self, data: bytes) -> bytes:
        """Sign data using Ed25519. Returns 64-byte signature."""
        return self._private_key.sign(data)

    @classmethod
    def generate(cls) -> "AttestationSigner":
        return cls(Ed25519PrivateKey.generate())

    @classmethod
    def from_private_bytes(cls, key_bytes: bytes) -> "AttestationSigner":
        """Create signer from raw 32-byte private key."""
        return cls(Ed25519PrivateKey.from_private_bytes(key_bytes))

    @classmethod
    def from_pem_file(cls, path: str, password: Optional[bytes] = None) -> "AttestationSigner":
        """Load signer from PEM-encoded private key file."""
        with open(path, "rb") as f:
            private_key = serialization.load_pem_private_key(
                f.read(),
                password=password,
            )
        if not isinstance(private_key, Ed25519PrivateKey):
            raise TypeError(f"Expected Ed25519 private key, got {type(private_key)}")
        return cls(private_key)

    def export_private_pem(self) -> bytes:
        return self._private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    def export_public_pem(self) -> bytes:
        """Export public key as PEM for distribution to verifiers."""
        return self._public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )


class AttestationVerifier:
    """
    Ed25519 verifier for execution attestations.

    Verification is OFFLINE - all public keys must be pre-loaded.
    """

    def __init__(self):
        self._public_keys: Dict[str, Ed25519PublicKey] = {}

    def add_public_key(self, public_key_bytes: bytes) -> str:
        """Register a raw 32-byte Ed25519 public key. Returns its key id."""
        public_key = Ed25519PublicKey.from_public_bytes(public_key_bytes)
        key_id = compute_key_id(public_key_bytes)
        self._public_keys[key_id] = public_key
        return key_id

    def add_public_key_pem(self, pem_data: bytes) -> str:
        public_key = serialization.load_pem_public_key(pem_data)
        if not isinstance(public_key, Ed25519PublicKey):
            raise TypeError(f"Expected Ed25519 public key, got {type(public_key)}")
        return self.add_public_key(_raw_public_bytes(public_key))

    def add_from_signer(self, signer: AttestationSigner) -> str:
        return self.add_public_key(signer.public_key_bytes)

    def has_key(self, key_id: str) -> bool:
        return key_id in self._public_keys

    def verify(self, data: bytes, signature: bytes, key_id: str) -> bool:
        """
        Verify signature.

        Returns:
            True if valid, False if invalid or key not found
        """
        public_key = self._public_keys.get(key_id)
        if public_key is None:
            return False

        try:
            public_key.verify(signature, data)
            return True
        except InvalidSignature:
            return False
