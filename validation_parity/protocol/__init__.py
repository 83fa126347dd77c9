"""Dual-path equivalence protocol and cross-version checks."""

from validation_parity.protocol.equivalence import EquivalenceProtocol
from validation_parity.protocol.strategy import ValidationStrategy, VersionChecker
from validation_parity.protocol.versions import IdentityConverter, VersionedValidationEquivalence

__all__ = [
    "EquivalenceProtocol",
    "IdentityConverter",
    "ValidationStrategy",
    "VersionChecker",
    "VersionedValidationEquivalence",
]
