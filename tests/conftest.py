# tests/conftest.py
import pytest
import requests

from helpers import APP_UNDER_PROCESS


@pytest.fixture
def under_process_app():
    return dict(APP_UNDER_PROCESS)


@pytest.fixture
def timeout_exc():
    return requests.exceptions.ReadTimeout("read timed out (15s)")
