"""Pytest fixtures for testing"""

import pytest
from typing import List
from fastapi.testclient import TestClient
from fraudscan.api.main import create_app
from fraudscan.api.dependencies import get_session_store
from fraudscan.domain.models import RawRecord
from fraudscan.infrastructure.session_store import SessionStore


@pytest.fixture
def store() -> SessionStore:
    """Isolated session store per test"""
    return SessionStore(max_sessions=10)


@pytest.fixture
def client(store: SessionStore) -> TestClient:
    """Create FastAPI test client with an isolated session store"""
    app = create_app()
    app.dependency_overrides[get_session_store] = lambda: store
    return TestClient(app)


@pytest.fixture
def sample_csv() -> bytes:
    """
    Ten valid rows of activity code X plus one row without a business area.

    Row 3 (5,000 against a 590 average) is the only candidate.
    """
    lines = [
        "BA,monthly,actCode,amount",
        "A,2024-01,X,100",
        "A,2024-01,X,100",
        ",2024-01,X,999",
        'B,2024-01,X,"5,000"',
    ]
    lines += ["A,2024-02,X,100"] * 7
    return ("\n".join(lines) + "\n").encode("utf-8")


@pytest.fixture
def flat_csv() -> bytes:
    """Uniform amounts, so nothing is flagged"""
    lines = ["BA,monthly,actCode,amount"] + ["A,2024-01,X,250"] * 5
    return ("\n".join(lines) + "\n").encode("utf-8")


@pytest.fixture
def high_volume_rows() -> List[RawRecord]:
    """
    150 rows in business area Z. Activity code Q has nine rows of 100 and
    one of 280; the outlier sits at about 2.37x the category average (118),
    below 3.0 but above the 2.0 high-volume threshold.
    """
    rows = [RawRecord("Z", "2024-01", "P", "50") for _ in range(140)]
    rows += [RawRecord("Z", "2024-01", "Q", "100") for _ in range(9)]
    rows.append(RawRecord("Z", "2024-01", "Q", "280"))
    return rows
