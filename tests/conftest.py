"""Shared fixtures for the harness test suite."""

from pathlib import Path

import pytest

import validation_parity.testing as parity_plugin
from validation_parity.fixtures.case_table import load_case_table
from validation_parity.protocol.equivalence import EquivalenceProtocol
from validation_parity.protocol.versions import VersionedValidationEquivalence
from validation_parity.utils.logger import configure_logging, current_log_level
from tests.resources.csr import API_GROUP, API_VERSIONS, CSRStrategy

RESOURCES_DIR = Path(__file__).parent / "resources"


def pytest_configure(config):
    # Running from a checkout where the pytest11 entry point is not installed
    if not config.pluginmanager.is_registered(parity_plugin):
        config.pluginmanager.register(parity_plugin, "validation_parity")


@pytest.fixture
def csr_strategy():
    return CSRStrategy()


@pytest.fixture
def csr_table():
    return load_case_table(RESOURCES_DIR / "csr_cases.yaml")


@pytest.fixture
def csr_protocol(csr_strategy, feature_gate):
    """Protocol over the sample CSR resource, with the cross-version checker."""
    return EquivalenceProtocol(
        csr_strategy,
        feature_gate,
        API_GROUP,
        API_VERSIONS,
        version_checker=VersionedValidationEquivalence(csr_strategy, API_GROUP, API_VERSIONS),
    )


@pytest.fixture
def harness_log_level():
    """Restore the harness log level after a test that changes it."""
    previous = current_log_level()
    yield
    configure_logging(previous)
