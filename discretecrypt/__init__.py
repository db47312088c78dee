"""DiscreteCrypt: discrete-log identities, key exchange and signatures."""

__version__ = "0.1.0"

from .config import Config, GroupParams, KdfConfig, KdfPreset
from .contact import Contact
from .crypto.envelope import Envelope
from .crypto.group import decompose, subgroup_generator
from .crypto.kdf import scrypt
from .exchange import ExchangeCache, Transport, clear_cache, exchange, open
from .signature import Signature, sign, verify
from . import symmetric

__all__ = [
    "Config",
    "Contact",
    "Envelope",
    "ExchangeCache",
    "GroupParams",
    "KdfConfig",
    "KdfPreset",
    "Signature",
    "Transport",
    "clear_cache",
    "decompose",
    "exchange",
    "open",
    "scrypt",
    "sign",
    "subgroup_generator",
    "symmetric",
    "verify",
]
