"""Test configuration for the DiscreteCrypt package."""

import pytest
import pytest_asyncio

from discretecrypt import Contact, KdfConfig, clear_cache

PASSWORD = "Hello World"
SALT = "00"


@pytest.fixture(autouse=True)
def _fresh_exchange_cache():
    """Every test starts and ends with an empty default exchange cache."""
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def ephemeral() -> KdfConfig:
    """Cheap scrypt parameters; security is irrelevant in tests."""
    return KdfConfig.ephemeral()


@pytest_asyncio.fixture
async def alice(ephemeral) -> Contact:
    """Password-derived contact."""
    return await Contact.create(PASSWORD, SALT, ephemeral)


@pytest_asyncio.fixture
async def bob() -> Contact:
    """Randomly keyed contact."""
    return await Contact.create()


def flip_bit(hex_field: str, bit: int = 0) -> str:
    """Flip one bit of a hex-encoded field."""
    data = bytearray(bytes.fromhex(hex_field))
    data[bit // 8] ^= 1 << (bit % 8)
    return data.hex()


@pytest.fixture
def flip():
    """Provide :func:`flip_bit` to tests."""
    return flip_bit
