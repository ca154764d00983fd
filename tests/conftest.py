import pytest
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from gpa_api.config import Settings, get_settings
from gpa_api.dependencies import get_scoring_client
from gpa_api.main import app


class FakeScoringClient:
    """Records payloads instead of calling the scoring engine."""

    def __init__(self):
        self.payloads = []
        self.error = None
        self.qass_data = {
            "studentScores": [
                {"student": "1", "rating": 0.6, "contribution": 1.1, "score": 0.75},
                {"student": "2", "rating": 0.5, "contribution": 0.9, "score": 0.65},
            ],
            "mean": {"rating": 0.55, "contribution": 1.0, "score": 0.7},
        }
        self.webavalia_data = {
            "studentGrades": [{"student": "1", "score": 15.5}, {"student": "2", "score": 14.5}],
            "mean": {"score": 15.0},
        }

    def _respond(self, payload, data):
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error
        return data

    def calculate_qass(self, payload):
        return self._respond(payload, self.qass_data)

    def calculate_webavalia(self, payload):
        return self._respond(payload, self.webavalia_data)


@pytest.fixture(scope="function")
def scoring_client():
    return FakeScoringClient()


@pytest.fixture(scope="function")
def client(scoring_client):
    """
    Create a TestClient whose scoring engine is replaced by the fake client.
    """
    app.dependency_overrides[get_scoring_client] = lambda: scoring_client
    app.dependency_overrides[get_settings] = lambda: Settings(random_seed=7)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
