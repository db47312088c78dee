from __future__ import annotations

import json

import pytest

from discretecrypt import Contact, GroupParams, KdfConfig
from discretecrypt.config import ENV_FORCE_PORTABLE_KDF, ENV_KDF_PRESET
from discretecrypt.crypto.errors import IncorrectKeyError, InvalidArgumentError, MissingKeyError

PASSWORD = "Hello World"

# Derived from password "Hello World" and salt "00" with the ephemeral preset.
GOLDEN_PRIVATE = 100393829911931591529540054103479785938321494005673330544449391501206113347665
GOLDEN_PUBLIC = int(
    "9792532548672888919679971598764755635234283151150703798980374106719708930523"
    "7871979508092013416113272253621273811757411540178245109478752259809099205437"
    "2064598686322515206942690533325183109033388366388258967054364511924791230936"
    "1629944417993931744623281384529959633597945590670524011060646764461491401650"
    "6295704302353181554780621156920222845273886201460288469541141805917245284642"
    "5814972935346893067365822215836958732024701103216644016550924411802573560930"
    "3623999464186170629487522929046459172985052148528224341755983970986133100949"
    "8776325568555401175628578649102022166584658064471230175070176722339494759084"
    "1613567365320360471998600391508649023989443901075181195196400874248346469507"
    "6622467606051797264966444926176990711466875599776511606850041581051987470861"
    "3118583886984136151025239478845902472681202254567434206741466784539967600616"
    "8448374914787462159370004197462147612033356205470238970206950413832384381187"
    "006393689014778"
)


@pytest.mark.asyncio
async def test_create_populates_every_field(alice: Contact, ephemeral: KdfConfig) -> None:
    assert alice.salt == "00"
    assert alice.private is not None
    assert alice.public is not None
    assert alice.params == GroupParams.default()
    assert alice.kdf_config == ephemeral


@pytest.mark.asyncio
async def test_golden_keypair(alice: Contact) -> None:
    assert alice.private == GOLDEN_PRIVATE
    assert alice.public == GOLDEN_PUBLIC
    assert alice.to_dict()["public"] == str(GOLDEN_PUBLIC)


@pytest.mark.asyncio
async def test_golden_keypair_portable_backend(ephemeral: KdfConfig, monkeypatch) -> None:
    monkeypatch.setenv(ENV_FORCE_PORTABLE_KDF, "1")
    contact = await Contact.create(PASSWORD, "00", ephemeral)
    assert contact.private == GOLDEN_PRIVATE


@pytest.mark.asyncio
async def test_public_key_matches_private(alice: Contact) -> None:
    params = alice.group
    assert alice.public == pow(params.gen, alice.private, params.prime)
    assert 0 < alice.private < params.prime


@pytest.mark.asyncio
async def test_password_derivation_is_deterministic(alice: Contact, ephemeral: KdfConfig) -> None:
    again = await Contact.create(PASSWORD, "00", ephemeral)
    assert again.private == alice.private
    assert again.public == alice.public

    other_salt = await Contact.create(PASSWORD, "01", ephemeral)
    assert other_salt.public != alice.public


@pytest.mark.asyncio
async def test_salt_accepts_bytes(alice: Contact, ephemeral: KdfConfig) -> None:
    same = await Contact.create(PASSWORD, b"\x00", ephemeral)
    assert same.salt == "00"
    assert same.public == alice.public


@pytest.mark.asyncio
async def test_numeric_password_is_stringified(ephemeral: KdfConfig) -> None:
    a = await Contact.create(1234, "00", ephemeral)
    b = await Contact.create("1234", "00", ephemeral)
    assert a.public == b.public


@pytest.mark.asyncio
async def test_random_contact(bob: Contact) -> None:
    assert len(bob.salt) == 32
    bytes.fromhex(bob.salt)
    assert bob.kdf_config == KdfConfig.ephemeral()
    assert bob.private is not None


@pytest.mark.asyncio
async def test_empty_password_is_random(ephemeral: KdfConfig) -> None:
    a = await Contact.create("", "00", ephemeral)
    b = await Contact.create("", "00", ephemeral)
    assert a.public != b.public


@pytest.mark.asyncio
async def test_password_uses_configured_preset(monkeypatch) -> None:
    monkeypatch.setenv(ENV_KDF_PRESET, "tuned")
    contact = await Contact.create(PASSWORD, "00")
    assert contact.kdf_config == KdfConfig.tuned()


@pytest.mark.asyncio
async def test_custom_group(ephemeral: KdfConfig) -> None:
    params = GroupParams(prime=2039, gen=7)
    contact = await Contact.create(PASSWORD, "00", ephemeral, params)
    assert contact.private < 2039
    assert contact.public == pow(7, contact.private, 2039)


@pytest.mark.asyncio
async def test_export_never_contains_private(alice: Contact) -> None:
    record = json.loads(alice.export())
    assert "private" not in record
    assert record["salt"] == "00"
    assert record["public"] == str(alice.public)
    assert record["params"] == {"prime": str(alice.group.prime), "gen": "2"}
    assert record["kdfConfig"] == {"N": 1024, "r": 4, "p": 1, "len": 32}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "flags,dropped",
    [
        ({"params": True}, {"params"}),
        ({"kdf_config": True}, {"kdfConfig"}),
        ({"all": True}, {"params", "kdfConfig"}),
    ],
)
async def test_export_flags(alice: Contact, flags, dropped) -> None:
    record = alice.to_dict(**flags)
    for key in ("params", "kdfConfig"):
        assert (key in record) is (key not in dropped)
    assert alice.private is not None


@pytest.mark.asyncio
async def test_compute_restores_private_key(alice: Contact) -> None:
    imported = Contact.from_json(alice.export())
    assert imported.private is None

    restored = await imported.compute(PASSWORD)
    assert restored is imported
    assert imported.private == alice.private


@pytest.mark.asyncio
async def test_compute_wrong_password(alice: Contact) -> None:
    imported = Contact.import_record(alice.export())
    with pytest.raises(IncorrectKeyError):
        await imported.compute("Hello, World!")
    assert imported.private is None


@pytest.mark.asyncio
async def test_compute_keeps_existing_private_on_failure(alice: Contact) -> None:
    original = alice.private
    with pytest.raises(IncorrectKeyError):
        await alice.compute("wrong")
    assert alice.private == original


@pytest.mark.asyncio
async def test_compute_with_default_params_stripped(alice: Contact) -> None:
    imported = Contact.from_json(alice.export(params=True))
    assert imported.params is None
    await imported.compute(PASSWORD)
    assert imported.private == alice.private


@pytest.mark.asyncio
async def test_compute_requires_public(ephemeral: KdfConfig) -> None:
    contact = Contact(salt="00", kdf_config=ephemeral)
    with pytest.raises(MissingKeyError):
        await contact.compute(PASSWORD)


@pytest.mark.asyncio
async def test_clean(alice: Contact) -> None:
    assert alice.clean() is alice
    assert alice.private is None
    assert alice.params is not None

    alice.clean(params=True)
    assert alice.params is None
    assert alice.kdf_config is not None

    alice.clean(all=True)
    assert alice.kdf_config is None


@pytest.mark.asyncio
async def test_clean_kdf_config_only(alice: Contact) -> None:
    alice.clean(kdf_config=True)
    assert alice.kdf_config is None
    assert alice.params is not None


@pytest.mark.asyncio
async def test_key_accessors(alice: Contact) -> None:
    assert alice.private_key() == alice.private
    assert alice.public_key() == alice.public

    imported = Contact.from_dict(alice.to_dict())
    with pytest.raises(MissingKeyError):
        imported.private_key()

    imported.public = 0
    with pytest.raises(MissingKeyError):
        imported.public_key()


@pytest.mark.asyncio
async def test_from_dict_clones_private(alice: Contact) -> None:
    blob = alice.to_dict()
    blob["private"] = str(alice.private)
    clone = Contact.from_dict(blob)
    assert clone.private == alice.private
    assert clone == alice


def test_from_dict_rejects_non_mapping() -> None:
    with pytest.raises(InvalidArgumentError):
        Contact.from_dict(["not", "a", "record"])


def test_defaults_for_bare_contact() -> None:
    contact = Contact(salt="00", public=5)
    assert contact.group == GroupParams.default()
    assert contact.kdf == KdfConfig.default()
    assert not contact.has_private


def test_setters_chain() -> None:
    contact = Contact().set_params(GroupParams(prime=23, gen=5)).set_kdf_config(KdfConfig.ephemeral())
    assert contact.params == GroupParams(prime=23, gen=5)
    assert contact.kdf_config == KdfConfig.ephemeral()


def test_private_key_hidden_from_repr() -> None:
    contact = Contact(salt="00", public=5, private=123456789)
    assert "123456789" not in repr(contact)
