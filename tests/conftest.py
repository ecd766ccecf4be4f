"""
Shared test config
"""
# Third Party
import pytest

# Local
from kubemanifest.test_helpers.helpers import (
    FakeClock,
    configure_logging,
    sample_kind,
)

configure_logging()


@pytest.fixture
def kind():
    """A fresh copy of the sample kind"""
    return sample_kind()


@pytest.fixture
def clock():
    """A deterministic nanosecond clock"""
    return FakeClock()
