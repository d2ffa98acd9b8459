import os
import unittest
from unittest.mock import MagicMock, patch

from luckybox.errors import RandomnessNotReady
from luckybox.randomness import RandomnessAdapter
from luckybox.randomness.api import OracleClient
from luckybox.randomness.utils import open_session


class DummyResponse:
    def __init__(self, json_data=None, content: bytes = b""):
        self._json = json_data
        if json_data is not None and not content:
            import json as _json

            content = _json.dumps(json_data).encode()
        self.content = content

    def json(self):
        return self._json

    def raise_for_status(self):
        pass


class DummySession:
    def __init__(self, *responses: DummyResponse):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, params=None, json=None, timeout=None):
        self.calls.append(
            {
                "method": method,
                "url": url,
                "params": params,
                "json": json,
                "timeout": timeout,
            }
        )
        return self.responses.pop(0)


class TestOracleClient(unittest.TestCase):
    @patch("luckybox.randomness.api.open_session")
    @patch("luckybox.randomness.api.load_dotenv")
    def test_requires_fqdn(self, mock_load_dotenv, mock_open_session):
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ValueError):
                OracleClient()
        mock_open_session.assert_not_called()

    @patch("luckybox.randomness.api.open_session")
    def test_request_posts_and_returns_id(self, mock_open_session):
        session = DummySession(DummyResponse(json_data={"request_id": "abc-1"}))
        mock_open_session.return_value = session
        client = OracleClient(base_fqdn="oracle.example.com", timeout=5)

        self.assertIsInstance(client, RandomnessAdapter)
        self.assertEqual(client.base_url, "https://oracle.example.com")
        with self.assertLogs("luckybox.randomness.api", level="INFO") as logs:
            self.assertEqual(client.request(), "abc-1")
        self.assertIn("Requested randomness from oracle: abc-1", logs.output[-1])
        self.assertEqual(session.calls[0]["method"], "POST")
        self.assertEqual(
            session.calls[0]["url"],
            "https://oracle.example.com/api/v1/randomness/requests",
        )
        self.assertEqual(session.calls[0]["timeout"], 5)

    @patch("luckybox.randomness.api.open_session")
    def test_pending_then_fulfilled(self, mock_open_session):
        session = DummySession(
            DummyResponse(json_data={"status": "pending"}),
            DummyResponse(json_data={"status": "pending"}),
            DummyResponse(
                json_data={"status": "fulfilled", "result": str(2**200 + 1975)}
            ),
        )
        mock_open_session.return_value = session
        client = OracleClient(base_fqdn="oracle.example.com")

        self.assertFalse(client.is_fulfilled("abc-1"))
        with self.assertRaises(RandomnessNotReady):
            client.result("abc-1")
        self.assertTrue(client.is_fulfilled("abc-1"))
        # Cached after fulfilment, no further HTTP call.
        self.assertEqual(client.result("abc-1"), 2**200 + 1975)
        self.assertEqual(len(session.calls), 3)
        self.assertTrue(session.calls[0]["url"].endswith("/requests/abc-1"))

    @patch("luckybox.randomness.api.open_session")
    def test_malformed_request_response(self, mock_open_session):
        mock_open_session.return_value = DummySession(DummyResponse(json_data={}))
        client = OracleClient(base_fqdn="oracle.example.com")
        with self.assertRaises(RuntimeError):
            client.request()

    @patch("luckybox.randomness.api.open_session")
    def test_init_reports_session_error(self, mock_open_session):
        mock_open_session.side_effect = RuntimeError("network unreachable")
        with self.assertRaises(RuntimeError) as ctx:
            OracleClient(base_fqdn="oracle.example.com")
        self.assertIn("network unreachable", str(ctx.exception))


class TestOpenSession(unittest.TestCase):
    def test_requires_environment(self):
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(RuntimeError):
                open_session()
        with patch.dict(os.environ, {"RANDOMNESS_BASE_FQDN": "oracle.example.com"}, clear=True):
            with self.assertRaises(RuntimeError):
                open_session()

    @patch("luckybox.randomness.utils.requests.Session")
    def test_health_check_and_headers(self, mock_session_cls):
        session = MagicMock()
        session.headers = {}
        mock_session_cls.return_value = session
        env = {"RANDOMNESS_BASE_FQDN": "oracle.example.com", "RANDOMNESS_API_KEY": "k"}
        with patch.dict(os.environ, env, clear=True):
            result = open_session()

        self.assertIs(result, session)
        self.assertEqual(session.headers["X-API-KEY"], "k")
        session.get.assert_called_once_with("https://oracle.example.com/api/v1/health")

    @patch("luckybox.randomness.utils.requests.Session")
    def test_health_check_failure_is_wrapped(self, mock_session_cls):
        session = MagicMock()
        session.headers = {}
        session.get.side_effect = ConnectionError("refused")
        mock_session_cls.return_value = session
        env = {"RANDOMNESS_BASE_FQDN": "oracle.example.com", "RANDOMNESS_API_KEY": "k"}
        with patch.dict(os.environ, env, clear=True):
            with self.assertRaises(RuntimeError) as ctx:
                open_session()
        self.assertIn("refused", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
