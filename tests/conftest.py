"""
Shared fixtures for the Layer1 Digital SDK test suite
"""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from layer1_digital.config import Layer1Config
from layer1_digital.signing import RFC9421Signer

CLIENT_ID = "client-123"
ASSET_POOL_ID = "p1"
FIXED_TIMESTAMP = 1700000000


@pytest.fixture(scope="session")
def rsa_private_key():
    """2048-bit RSA key shared by the whole session"""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_private_key):
    """PKCS#8 PEM text as written by the cryptography package (64-column lines)"""
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    ).decode('ascii')


@pytest.fixture
def signer(private_key_pem):
    """Signer with a fixed clock"""
    return RFC9421Signer(private_key_pem, CLIENT_ID, timestamp_generator=lambda: FIXED_TIMESTAMP)


@pytest.fixture
def config(private_key_pem):
    return Layer1Config(
        asset_pool_id=ASSET_POOL_ID,
        client_id=CLIENT_ID,
        private_key=private_key_pem,
    )
