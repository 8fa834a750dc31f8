"""Shared fixtures for the datalens tests.

MongoDB and the LLM are never reached: storage functions and the summary
call are monkeypatched per test.
"""
import os
import tempfile

import pytest


def pytest_configure(config):
    """Set dummy settings before any datalens module is imported.

    datalens.constants.stat builds the ChatGroq client at import time, which
    fails without an API key in the environment.
    """
    os.environ.setdefault("GROQ_API_KEY", "gsk-test-dummy-for-tests")
    os.environ.setdefault("UPLOAD_FOLDER", tempfile.mkdtemp(prefix="datalens-uploads-"))


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Point the loader at an isolated upload folder."""
    monkeypatch.setattr("datalens.services.loader.UPLOAD_FOLDER", str(tmp_path))
    return tmp_path


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from datalens.app import app

    with TestClient(app) as c:
        yield c
