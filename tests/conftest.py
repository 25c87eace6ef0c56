import sys
from pathlib import Path

import pytest


# Ensure tests can import project packages regardless of how pytest is invoked.
ROOT = Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)
if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)


@pytest.fixture(autouse=True)
def _reset_registry_singleton():
    from stream_resolver import EndpointRegistry

    EndpointRegistry.reset_instance()
    yield
    EndpointRegistry.reset_instance()
