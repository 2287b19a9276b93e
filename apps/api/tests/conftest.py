"""
Pytest configuration and fixtures

The engine is pure apart from the external generation client, so tests never
touch the network: the client is always a fixtures/program_fixtures.py fake.
"""
import pytest
import sys
import os
import json

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.program_framework.config import ConfigService
from fixtures.program_fixtures import FakeGenerationClient, make_candidate, make_profile


@pytest.fixture(autouse=True)
def _fresh_rule_config():
    """Rule tables are cached on the class; reload so tests never share state."""
    ConfigService._config = None
    yield
    ConfigService._config = None


@pytest.fixture
def profile():
    return make_profile()


@pytest.fixture
def candidate():
    return make_candidate()


@pytest.fixture
def candidate_text(candidate):
    return json.dumps(candidate)


@pytest.fixture
def fake_client():
    return FakeGenerationClient()
