import pytest
import requests

from gpa_api.config import Settings
from gpa_api.services.scoring_client import ScoringClient, ScoringServiceError


class _Response:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class _Session:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append((url, json, timeout))
        if self.error is not None:
            raise self.error
        return self.response


def _client(session):
    settings = Settings(scoring_api_url="http://engine.local/", scoring_api_timeout=3)
    return ScoringClient(settings, session=session)


def test_qass_unwraps_data_envelope() -> None:
    session = _Session(_Response(body={"data": {"studentScores": [], "mean": None}}))
    data = _client(session).calculate_qass({"mode": "Bijunction"})
    assert data == {"studentScores": [], "mean": None}
    url, payload, timeout = session.calls[0]
    assert url == "http://engine.local/api/simulation/qass"
    assert payload == {"mode": "Bijunction"}
    assert timeout == 3


def test_webavalia_uses_its_own_path() -> None:
    session = _Session(_Response(body={"data": {"studentGrades": []}}))
    _client(session).calculate_webavalia({})
    assert session.calls[0][0] == "http://engine.local/api/simulation/webavalia"


def test_http_error_is_wrapped() -> None:
    session = _Session(_Response(status_code=500, body={"message": "boom"}))
    with pytest.raises(ScoringServiceError):
        _client(session).calculate_qass({})


def test_connection_error_is_wrapped() -> None:
    session = _Session(error=requests.ConnectionError("refused"))
    with pytest.raises(ScoringServiceError):
        _client(session).calculate_qass({})


def test_invalid_body_is_wrapped() -> None:
    with pytest.raises(ScoringServiceError):
        _client(_Session(_Response(body=None))).calculate_qass({})
    with pytest.raises(ScoringServiceError, match="missing data"):
        _client(_Session(_Response(body={"message": "ok"}))).calculate_qass({})
