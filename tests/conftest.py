"""
conftest.py: shared pytest fixtures
Adds the project root to sys.path so `readiness.*` imports resolve correctly
regardless of where pytest is invoked from.
"""

import socket
import sys
from pathlib import Path

# This file lives at  <root>/tests/conftest.py
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest
from fastapi.testclient import TestClient
from readiness.main import app


@pytest.fixture(scope="session")
def client():
    """Synchronous test client (no real network calls)."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def public_dns(monkeypatch):
    """Every hostname resolves to a public address."""
    def fake_getaddrinfo(host, port, *args, **kwargs):
        return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("93.184.216.34", 0))]
    monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo)


@pytest.fixture
def safe_url():
    return "https://example.com"


@pytest.fixture
def private_url():
    return "http://192.168.1.1"


@pytest.fixture
def localhost_url():
    return "http://127.0.0.1:8080"
