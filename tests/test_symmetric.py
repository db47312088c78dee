from __future__ import annotations

from dataclasses import replace

import pytest

from discretecrypt import KdfConfig, symmetric
from discretecrypt.config import ENV_KDF_PRESET
from discretecrypt.crypto.errors import DecryptionError, EmptyInputKeyError, InputKeyError, NoInputKeyError

KEY = "correct horse battery staple"


@pytest.mark.asyncio
async def test_encrypt_decrypt_roundtrip(ephemeral: KdfConfig) -> None:
    env = await symmetric.encrypt(KEY, {"msg": "Hello"}, ephemeral)
    assert await symmetric.decrypt(KEY, env, ephemeral) == {"msg": "Hello"}


@pytest.mark.asyncio
async def test_envelope_has_no_public_field(ephemeral: KdfConfig) -> None:
    env = await symmetric.encrypt(KEY, "x", ephemeral)
    assert env.public is None
    assert "public" not in env.to_dict()


@pytest.mark.asyncio
async def test_wrong_key_fails(ephemeral: KdfConfig) -> None:
    env = await symmetric.encrypt(KEY, "secret", ephemeral)
    with pytest.raises(DecryptionError):
        await symmetric.decrypt("incorrect horse", env, ephemeral)


@pytest.mark.asyncio
async def test_kdf_mismatch_fails(ephemeral: KdfConfig) -> None:
    env = await symmetric.encrypt(KEY, "secret", ephemeral)
    with pytest.raises(DecryptionError):
        await symmetric.decrypt(KEY, env, replace(ephemeral, p=2))


@pytest.mark.asyncio
async def test_tampering_fails(ephemeral: KdfConfig, flip) -> None:
    env = await symmetric.encrypt(KEY, "secret", ephemeral)
    with pytest.raises(DecryptionError):
        await symmetric.decrypt(KEY, replace(env, payload=flip(env.payload)), ephemeral)


@pytest.mark.asyncio
async def test_key_forms(ephemeral: KdfConfig) -> None:
    env = await symmetric.encrypt(b"raw key bytes", "a", ephemeral)
    assert await symmetric.decrypt(b"raw key bytes", env, ephemeral) == "a"

    env = await symmetric.encrypt(42, "b", ephemeral)
    assert await symmetric.decrypt("42", env, ephemeral) == "b"

    # compatibility ligature normalizes to "fi"
    env = await symmetric.encrypt("ﬁ", "c", ephemeral)
    assert await symmetric.decrypt("fi", env, ephemeral) == "c"


@pytest.mark.asyncio
async def test_raw_mode(ephemeral: KdfConfig) -> None:
    env = await symmetric.encrypt(KEY, b"\x00\x01\x02", ephemeral, raw=True)
    assert await symmetric.decrypt(KEY, env, ephemeral, raw=True) == b"\x00\x01\x02"


@pytest.mark.asyncio
async def test_decrypt_accepts_dict_and_json(ephemeral: KdfConfig) -> None:
    env = await symmetric.encrypt(KEY, [1, 2, 3], ephemeral)
    assert await symmetric.decrypt(KEY, env.to_dict(), ephemeral) == [1, 2, 3]
    assert await symmetric.decrypt(KEY, env.to_json(), ephemeral) == [1, 2, 3]


@pytest.mark.asyncio
async def test_missing_key(ephemeral: KdfConfig) -> None:
    with pytest.raises(NoInputKeyError):
        await symmetric.encrypt(None, "x", ephemeral)

    env = await symmetric.encrypt(KEY, "x", ephemeral)
    with pytest.raises(NoInputKeyError):
        await symmetric.decrypt(None, env, ephemeral)


@pytest.mark.asyncio
@pytest.mark.parametrize("empty", ["", b""])
async def test_empty_key(ephemeral: KdfConfig, empty) -> None:
    with pytest.raises(EmptyInputKeyError):
        await symmetric.encrypt(empty, "x", ephemeral)

    env = await symmetric.encrypt(KEY, "x", ephemeral)
    with pytest.raises(InputKeyError):
        await symmetric.decrypt(empty, env, ephemeral)


@pytest.mark.asyncio
async def test_default_kdf_from_environment(monkeypatch) -> None:
    monkeypatch.setenv(ENV_KDF_PRESET, "ephemeral")
    env = await symmetric.encrypt(KEY, "configured")
    assert await symmetric.decrypt(KEY, env, KdfConfig.ephemeral()) == "configured"
