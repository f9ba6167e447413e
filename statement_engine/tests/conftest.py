"""
Statement Engine - Pytest Configuration and Fixtures

This module provides shared fixtures and sample messages for all tests.
"""

import pytest

from statement_engine.core.config import Config, Environment, set_config
from statement_engine.core.structured_logging import reset_logging


SAMPLE_MESSAGE = """:20:STARTUMSE
:25:10020030/1234567
:28C:00001/001
:60F:C230101EUR1234,56
:61:2301020102D12,00NTRFNONREF//B123
:86:166?00GUTSCHRIFT?109075?20EREF+TESTREF?21SVWZ+INVOICE 42?30DEUTDEFF?31123456?32MAX MUSTER
?33MANN?34997
:62F:C230102EUR1222,56
-
:20:STARTUMSE
:25:10020030/1234567
:28C:00002/001
:60M:C230102EUR1222,56
:61:230103C100,00NTRFREF123//desc
:86:RENT JANUARY
:62F:C230103EUR1322,56
:64:C230103EUR1322,56
:65:CALTEUR1322,56
-"""


@pytest.fixture
def sample_message():
    """Two-statement MT940 message with LF line endings."""
    return SAMPLE_MESSAGE


@pytest.fixture
def sample_message_crlf():
    """The sample message with CRLF line endings."""
    return SAMPLE_MESSAGE.replace("\n", "\r\n")


@pytest.fixture
def test_config():
    """Create test configuration."""
    config = Config()
    config.environment = Environment.TESTING
    config.metrics_enabled = True
    return config


@pytest.fixture(autouse=True)
def _isolate_global_state():
    """Keep process-wide configuration and logging handlers out of other tests."""
    set_config(Config(environment=Environment.TESTING))
    yield
    set_config(None)
    reset_logging()
