"""Discrete-log identities.

A :class:`Contact` is a keypair in a multiplicative group together with the
salt and scrypt parameters needed to re-derive the private key from a
password. Exported records never contain the private key; the holder of the
password can restore it with :meth:`Contact.compute`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from . import exchange as _exchange
from . import signature as _signature
from .config import Config, GroupParams, KdfConfig
from .crypto.envelope import Envelope
from .crypto.errors import IncorrectKeyError, InvalidArgumentError, MissingKeyError
from .crypto.kdf import scrypt
from .crypto.numeric import bytes_to_int, mod_pow, to_int
from .crypto.random import random_bytes, random_hex
from .crypto.serialization import PasswordInput, SaltInput, normalize_password, normalize_salt

logger = logging.getLogger(__name__)

SALT_LENGTH = 16
RANDOM_KEY_LENGTH = 32


async def _derive_keypair(
    key: bytes,
    salt: str,
    kdf_config: KdfConfig,
    params: GroupParams,
) -> tuple[int, int]:
    secret = await scrypt(key, salt, kdf_config)
    private = bytes_to_int(secret) % params.prime
    return private, mod_pow(params.gen, private, params.prime)


@dataclass(slots=True)
class Contact:
    """A discrete-log identity.

    Attributes:
        salt: Hex salt for password derivation.
        public: ``gen ** private mod prime``.
        private: Secret exponent; ``None`` for imported or cleaned contacts.
        params: Group parameters; ``None`` means the library default.
        kdf_config: Scrypt parameters; ``None`` means the library default.
    """

    salt: str = ""
    public: Optional[int] = None
    private: Optional[int] = field(default=None, repr=False)
    params: Optional[GroupParams] = None
    kdf_config: Optional[KdfConfig] = None

    @property
    def group(self) -> GroupParams:
        return self.params or GroupParams.default()

    @property
    def kdf(self) -> KdfConfig:
        return self.kdf_config or KdfConfig.default()

    def public_key(self) -> int:
        if not self.public:
            raise MissingKeyError("public key not set")
        return self.public

    def private_key(self) -> int:
        if self.private is None:
            raise MissingKeyError("private key not set")
        return self.private

    @property
    def has_private(self) -> bool:
        return self.private is not None

    def set_params(self, params: GroupParams) -> Contact:
        self.params = params
        return self

    def set_kdf_config(self, kdf_config: KdfConfig) -> Contact:
        self.kdf_config = kdf_config
        return self

    @classmethod
    async def create(
        cls,
        password: Optional[PasswordInput] = None,
        salt: Optional[SaltInput] = None,
        kdf_config: Optional[KdfConfig] = None,
        params: Optional[GroupParams] = None,
    ) -> Contact:
        """
        Derive a new contact from a password, or from random key material.

        Args:
            password: Password (``str``, ``bytes`` or a number). When absent or
                empty, 32 random bytes are used instead.
            salt: Hex string or bytes. Defaults to 16 random bytes.
            kdf_config: Scrypt parameters. Defaults to the configured preset,
                or the ephemeral preset for random keys.
            params: Group parameters. Defaults to the embedded prime.

        Returns:
            A contact holding both keys.

        Raises:
            KdfError: If scrypt rejects the parameters.
        """
        key = normalize_password(password)
        if kdf_config is None:
            if key:
                kdf_config = Config.from_environment().kdf_config()
            else:
                # A random key needs no brute-force resistance.
                kdf_config = KdfConfig.ephemeral()
        params = params or GroupParams.default()

        salt_hex = normalize_salt(salt).hex() if salt is not None else random_hex(SALT_LENGTH)
        if not key:
            key = random_bytes(RANDOM_KEY_LENGTH)

        private, public = await _derive_keypair(key, salt_hex, kdf_config, params)
        return cls(
            salt=salt_hex,
            public=public,
            private=private,
            params=params,
            kdf_config=kdf_config,
        )

    async def compute(self, password: PasswordInput) -> Contact:
        """
        Restore the private key from ``password``.

        Raises:
            MissingKeyError: If the contact has no public key to check against.
            IncorrectKeyError: If the password does not reproduce the public
                key. ``private`` is left untouched.
        """
        expected = self.public_key()
        key = normalize_password(password) or b""

        private, public = await _derive_keypair(key, self.salt, self.kdf, self.group)
        if public != expected:
            logger.warning("password does not reproduce the stored public key")
            raise IncorrectKeyError("incorrect key")

        self.private = private
        return self

    def _redacted(self, *, params: bool, kdf_config: bool, all: bool) -> dict[str, Any]:
        out: dict[str, Any] = {"salt": self.salt}
        if self.public is not None:
            out["public"] = str(self.public)
        if self.params is not None and not (params or all):
            out["params"] = self.params.to_dict()
        if self.kdf_config is not None and not (kdf_config or all):
            out["kdfConfig"] = self.kdf_config.to_dict()
        return out

    def to_dict(self, *, params: bool = False, kdf_config: bool = False, all: bool = False) -> dict[str, Any]:
        """Shareable record without the private key.

        Args:
            params: Drop the group parameters.
            kdf_config: Drop the scrypt parameters.
            all: Drop both.
        """
        return self._redacted(params=params, kdf_config=kdf_config, all=all)

    def export(self, *, params: bool = False, kdf_config: bool = False, all: bool = False) -> str:
        """JSON form of :meth:`to_dict`."""
        return json.dumps(self.to_dict(params=params, kdf_config=kdf_config, all=all), separators=(",", ":"))

    def clean(self, *, params: bool = False, kdf_config: bool = False, all: bool = False) -> Contact:
        """Strip the private key (and optionally parameters) in place."""
        self.private = None
        if params or all:
            self.params = None
        if kdf_config or all:
            self.kdf_config = None
        return self

    @classmethod
    def from_dict(cls, blob: Mapping[str, Any]) -> Contact:
        """Rebuild a contact from :meth:`to_dict` output.

        A ``private`` entry is honoured when present so full in-memory copies
        can be cloned, but exported records never carry one.
        """
        try:
            public = blob.get("public")
            private = blob.get("private")
            raw_params = blob.get("params")
            raw_kdf = blob.get("kdfConfig")
            return cls(
                salt=str(blob.get("salt", "")),
                public=None if public in (None, "") else to_int(public),
                private=None if private in (None, "") else to_int(private),
                params=None if raw_params is None else GroupParams.from_dict(raw_params),
                kdf_config=None if raw_kdf is None else KdfConfig.from_dict(raw_kdf),
            )
        except AttributeError as e:
            raise InvalidArgumentError("contact record must be a mapping") from e

    @classmethod
    def from_json(cls, data: str | Mapping[str, Any]) -> Contact:
        if isinstance(data, str):
            data = json.loads(data)
        return cls.from_dict(data)

    import_record = from_json

    async def send(self, recipient: Contact, message: Any, *, raw: bool = False) -> Envelope:
        """Seal ``message`` for ``recipient`` via the default transport."""
        return await _exchange.exchange(self, recipient, message, raw=raw)

    async def open(self, envelope: Envelope | Mapping[str, Any] | str, *, raw: bool = False) -> Any:
        return await _exchange.open(self, envelope, raw=raw)

    async def sign(self, data: Any, bundle: bool = False) -> _signature.Signature:
        return await _signature.sign(self, data, bundle=bundle)

    def verify(self, signed: _signature.Signature | Mapping[str, Any], source: Any = None) -> Any:
        return _signature.verify(self, signed, source)
