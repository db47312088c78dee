"""Configuration management for DiscreteCrypt."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Any, Optional, List
from enum import Enum
import os

from .crypto.errors import InvalidArgumentError

ENV_FORCE_PORTABLE_KDF = "DISCRETECRYPT_FORCE_PORTABLE_KDF"
ENV_KDF_PRESET = "DISCRETECRYPT_KDF_PRESET"

# Nearly-safe prime: p - 1 = 420 * (large prime cofactor).
DEFAULT_PRIME = int(
    "1236027852723267358067496240415081192016632901798652377386974104662393263762300791015297301419782476103015366958792837873764932552461292791165884073898812814414137342163134112441573878695866548152604326906481241134560091096795607547486746060322717834549300353793656273878542405925895784382400028374603183267116520399667622873636417533621785188753096887486165751218947390793886174932206305484313257628695734926449809428884085464402485504798782585345665225579018127843073619788513405272670558284073983759985451287742892999484270521626583252756445695489268987027078838378407733148367649564107237496006094048593708959670063677802988307113944522310326616125731276572628521088574537964296697257866765026848588469121515995674723869067535040253689232576404893685613618463095967906841853447414047313021676108205138971649482561844148237707440562831931089544088821151806962538015278155763187487878945694840272084274212918033049841007502061"
)
DEFAULT_GENERATOR = 2

# Largest small prime factor expected in ``prime - 1``.
DEFAULT_BOUND = 1 << 12

_TRUTHY = {"1", "true", "yes", "on"}


def portable_kdf_forced() -> bool:
    """Whether ``DISCRETECRYPT_FORCE_PORTABLE_KDF`` is set to a truthy value."""
    return os.getenv(ENV_FORCE_PORTABLE_KDF, "").strip().lower() in _TRUTHY


class KdfPreset(Enum):
    """Canonical scrypt cost presets."""
    DEFAULT = "default"
    TUNED = "tuned"
    EPHEMERAL = "ephemeral"


@dataclass(frozen=True, slots=True)
class KdfConfig:
    """Scrypt tuning parameters.

    Attributes:
        n: CPU/memory cost, a power of two greater than one.
        r: Block size.
        p: Parallelization factor.
        length: Output length in bytes.
    """

    n: int = 1 << 14
    r: int = 10
    p: int = 3
    length: int = 64

    def __post_init__(self) -> None:
        for name in ("n", "r", "p", "length"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidArgumentError(f"{name} must be a positive integer")
        if self.n < 2 or self.n & (self.n - 1):
            raise InvalidArgumentError("n must be a power of two greater than one")

    @classmethod
    def default(cls) -> KdfConfig:
        """Worst-case preset for long-lived, password-derived keys."""
        return cls(n=1 << 14, r=10, p=3, length=64)

    @classmethod
    def tuned(cls) -> KdfConfig:
        """Cheaper preset for interactive use."""
        return cls(n=1 << 14, r=8, p=1, length=32)

    @classmethod
    def ephemeral(cls) -> KdfConfig:
        """Minimal preset for random (non-password) keys."""
        return cls(n=1 << 10, r=4, p=1, length=32)

    @classmethod
    def from_preset(cls, preset: KdfPreset) -> KdfConfig:
        return {
            KdfPreset.DEFAULT: cls.default,
            KdfPreset.TUNED: cls.tuned,
            KdfPreset.EPHEMERAL: cls.ephemeral,
        }[preset]()

    def with_length(self, length: int) -> KdfConfig:
        return replace(self, length=length)

    def to_dict(self) -> Dict[str, int]:
        return {"N": self.n, "r": self.r, "p": self.p, "len": self.length}

    @classmethod
    def from_dict(cls, blob: Dict[str, Any]) -> KdfConfig:
        try:
            return cls(
                n=int(blob["N"]),
                r=int(blob["r"]),
                p=int(blob["p"]),
                length=int(blob["len"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidArgumentError("malformed kdf config") from e


# Parameters for deterministic signature nonces; length is set per key.
SIGNATURE_KDF = KdfConfig(n=32, r=4, p=1, length=32)


@dataclass(frozen=True, slots=True)
class GroupParams:
    """Multiplicative group used for key agreement and signatures."""

    prime: int = DEFAULT_PRIME
    gen: int = DEFAULT_GENERATOR

    def __post_init__(self) -> None:
        if self.prime <= 2 or self.prime % 2 == 0:
            raise InvalidArgumentError("prime must be an odd integer greater than 2")
        if not 1 < self.gen < self.prime:
            raise InvalidArgumentError("generator must lie in (1, prime)")

    @classmethod
    def default(cls) -> GroupParams:
        return cls(prime=DEFAULT_PRIME, gen=DEFAULT_GENERATOR)

    def to_dict(self) -> Dict[str, str]:
        return {"prime": str(self.prime), "gen": str(self.gen)}

    @classmethod
    def from_dict(cls, blob: Dict[str, Any]) -> GroupParams:
        try:
            return cls(prime=int(str(blob["prime"])), gen=int(str(blob["gen"])))
        except (KeyError, TypeError, ValueError) as e:
            if isinstance(e, InvalidArgumentError):
                raise
            raise InvalidArgumentError("malformed group params") from e


class Config:
    """
    Configuration manager for DiscreteCrypt.

    Resolves the KDF preset and group parameters used when callers do not pass
    them explicitly, with environment-specific overrides.
    """

    def __init__(
        self,
        preset: KdfPreset = KdfPreset.DEFAULT,
        params: Optional[GroupParams] = None,
        force_portable_kdf: bool = False,
    ) -> None:
        """
        Initialize configuration manager.

        Args:
            preset: KDF preset used for password-derived keys.
            params: Group parameters. Defaults to the embedded prime.
            force_portable_kdf: Always use the portable scrypt backend.
        """
        self.preset = preset
        self.params = params or GroupParams.default()
        self._force_portable_kdf = force_portable_kdf
        self._presets: Dict[KdfPreset, KdfConfig] = {}
        self._custom_config: Dict[str, Any] = {}
        self._load_defaults()

    def _load_defaults(self) -> None:
        self._presets = {preset: KdfConfig.from_preset(preset) for preset in KdfPreset}

    @classmethod
    def from_environment(cls) -> Config:
        """Build a configuration honouring ``DISCRETECRYPT_*`` variables."""
        raw_preset = os.getenv(ENV_KDF_PRESET, KdfPreset.DEFAULT.value).strip().lower()
        try:
            preset = KdfPreset(raw_preset)
        except ValueError as e:
            raise InvalidArgumentError(f"unknown KDF preset: {raw_preset!r}") from e
        return cls(preset=preset, force_portable_kdf=portable_kdf_forced())

    @property
    def force_portable_kdf(self) -> bool:
        return bool(self.get("force_portable_kdf", self._force_portable_kdf))

    def kdf_config(self, preset: Optional[KdfPreset] = None) -> KdfConfig:
        """
        Get the KDF configuration for a preset.

        Args:
            preset: KDF preset. If None, uses the configured preset.

        Returns:
            KDF configuration object.
        """
        return self._presets[preset or self.preset]

    def set_custom_config(self, key: str, value: Any) -> None:
        self._custom_config[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Checks custom config first, then falls back to the active KDF preset.

        Args:
            key: Configuration key.
            default: Default value if key not found.

        Returns:
            Configuration value or default.
        """
        if key in self._custom_config:
            return self._custom_config[key]

        kdf = self.kdf_config()
        if hasattr(kdf, key):
            return getattr(kdf, key)

        return default

    def get_from_environment(self, key: str, env_var: str, default: Any = None) -> Any:
        env_value = os.getenv(env_var)
        if env_value is not None:
            return env_value
        return self.get(key, default)

    def validate(self) -> List[str]:
        """
        Validate current configuration.

        Returns:
            List of validation errors. Empty if valid.
        """
        errors = []
        kdf = self.kdf_config()

        if kdf.length < 16:
            errors.append("length must be at least 16 bytes")

        if 128 * kdf.r * kdf.n > 1 << 30:
            errors.append("n and r require more than 1 GiB of memory")

        if self.params.prime.bit_length() < 2048:
            errors.append("prime should be at least 2048 bits")

        return errors
