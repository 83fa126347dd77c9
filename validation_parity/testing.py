"""
pytest plugin for resource owners.

Registered through the ``pytest11`` entry point, so installing the package
is enough to get these fixtures:

    def test_csr_equivalence(feature_gate):
        protocol = EquivalenceProtocol(CSRStrategy(), feature_gate, "certificates.k8s.io")
        ...
"""

from typing import Iterator

import pytest

from validation_parity.config.settings import Settings
from validation_parity.gates.feature_gate import FeatureGate, new_default_feature_gate


@pytest.fixture
def feature_gate() -> Iterator[FeatureGate]:
    """Fresh gate registry, reset to defaults when the test ends."""
    gate = new_default_feature_gate()
    yield gate
    gate.reset()


@pytest.fixture
def parity_settings(monkeypatch) -> Settings:
    """Settings built from a clean environment (no ``PARITY_*`` variables)."""
    for name in (
        "PARITY_API_VERSIONS",
        "PARITY_REPORTS_ENABLED",
        "PARITY_REPORT_DIR",
        "PARITY_VERIFY_DISABLED_EQUIVALENCE",
        "PARITY_METRICS_ENABLED",
        "PARITY_METRICS_REGION",
        "PARITY_LOG_LEVEL",
        "PARITY_CONFIG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    return Settings()
