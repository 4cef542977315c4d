import json
import unittest
from unittest.mock import patch

import requests

from seranking.client import SeRankingClient
from seranking.errors import ApiError, TransportError, classify_error
from seranking.models import CreateTaskRequest, TaskStatusRequest


class FakeResponse:
    def __init__(self, status=200, payload=None, text=None):
        self.ok = status < 400
        self.status_code = status
        self._payload = payload
        self.text = json.dumps(payload) if text is None else text

    def json(self):
        if self._payload is None and self.text:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class SeRankingClientTests(unittest.TestCase):
    @patch("requests.post")
    def test_create_task_posts_json_with_token_header(self, mock_post):
        mock_post.return_value = FakeResponse(payload=[{"query": "a", "task_id": 1}])
        client = SeRankingClient("secret")
        payload = client.create_serp_task(CreateTaskRequest(engine_id=200, keywords=["a", "b"]))
        kwargs = mock_post.call_args.kwargs
        self.assertEqual(kwargs["url"], "https://api.seranking.com/v1/serp/tasks")
        self.assertEqual(kwargs["json"], {"engine_id": 200, "query": ["a", "b"]})
        self.assertEqual(kwargs["headers"]["Authorization"], "Token secret")
        self.assertEqual(kwargs["headers"]["Content-Type"], "application/json")
        self.assertEqual(kwargs["timeout"], 30)
        self.assertEqual(payload, [{"query": "a", "task_id": 1}])

    @patch("requests.get")
    def test_status_passes_task_id_as_query_param(self, mock_get):
        mock_get.return_value = FakeResponse(payload={"status": "processing"})
        client = SeRankingClient("secret", base_url="https://api.example.com/")
        payload = client.get_task_status(TaskStatusRequest(task_id="99"))
        kwargs = mock_get.call_args.kwargs
        self.assertEqual(kwargs["url"], "https://api.example.com/v1/serp/tasks/status")
        self.assertEqual(kwargs["params"], {"task_id": "99"})
        self.assertEqual(kwargs["headers"], {"Authorization": "Token secret"})
        self.assertEqual(kwargs["timeout"], 30)
        self.assertEqual(payload, {"status": "processing"})

    @patch("requests.get")
    def test_non_2xx_raises_api_error_with_body(self, mock_get):
        mock_get.return_value = FakeResponse(status=404, payload={"message": "Task not found"})
        client = SeRankingClient("secret")
        with self.assertRaises(ApiError) as ctx:
            client.get_task_status(TaskStatusRequest(task_id="missing"))
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(classify_error(ctx.exception), ("Task not found", "404"))

    @patch("requests.get")
    def test_text_error_body_classifies_with_status_code(self, mock_get):
        mock_get.return_value = FakeResponse(status=502, payload=None, text="<html>Bad gateway</html>")
        client = SeRankingClient("secret")
        with self.assertRaises(ApiError) as ctx:
            client.get_task_status(TaskStatusRequest(task_id="1"))
        self.assertEqual(ctx.exception.body, "<html>Bad gateway</html>")
        self.assertEqual(classify_error(ctx.exception), ("Request failed with status code 502", "502"))

    @patch("requests.get")
    def test_list_error_body_classifies_with_status_code(self, mock_get):
        mock_get.return_value = FakeResponse(status=404, payload=[{"message": "x"}])
        client = SeRankingClient("secret")
        with self.assertRaises(ApiError) as ctx:
            client.get_task_status(TaskStatusRequest(task_id="1"))
        self.assertEqual(classify_error(ctx.exception), ("Request failed with status code 404", "404"))

    @patch("requests.get")
    def test_empty_error_body_keeps_transport_style_code(self, mock_get):
        mock_get.return_value = FakeResponse(status=503, payload=None, text="")
        client = SeRankingClient("secret")
        with self.assertRaises(ApiError) as ctx:
            client.get_task_status(TaskStatusRequest(task_id="1"))
        self.assertIsNone(ctx.exception.body)
        self.assertEqual(
            classify_error(ctx.exception),
            ("Request failed with status code 503", "ERR_BAD_RESPONSE"),
        )

    @patch("requests.post")
    def test_non_json_success_body_is_returned_as_text(self, mock_post):
        mock_post.return_value = FakeResponse(payload=None, text="accepted")
        client = SeRankingClient("secret")
        self.assertEqual(client.create_serp_task(CreateTaskRequest(engine_id=1, keywords=["a"])), "accepted")

    @patch("requests.get")
    def test_timeout_becomes_transport_error(self, mock_get):
        mock_get.side_effect = requests.Timeout("read timed out")
        client = SeRankingClient("secret")
        with self.assertRaises(TransportError) as ctx:
            client.get_task_status(TaskStatusRequest(task_id="1"))
        self.assertEqual(ctx.exception.code, "TIMEOUT")
        self.assertEqual(classify_error(ctx.exception)[1], "TIMEOUT")

    @patch("requests.post")
    def test_connection_error_becomes_transport_error(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("refused")
        client = SeRankingClient("secret")
        with self.assertRaises(TransportError) as ctx:
            client.create_serp_task(CreateTaskRequest(engine_id=1, keywords=["a"]))
        self.assertEqual(ctx.exception.code, "CONNECTION_ERROR")

    @patch("requests.get")
    def test_evidence_log_never_contains_token(self, mock_get):
        mock_get.return_value = FakeResponse(payload={})
        client = SeRankingClient("super-secret-token")
        client.get_task_status(TaskStatusRequest(task_id="1"))
        self.assertEqual(len(client.evidence_log), 1)
        self.assertNotIn("super-secret-token", json.dumps(client.evidence_log))
        self.assertEqual(client.evidence_log[0]["status_code"], 200)


class ClassifyErrorTests(unittest.TestCase):
    def test_prefers_error_description_over_message(self):
        exc = ApiError("Request failed with status code 401", 401, {"error_description": "Bad token", "message": "x"})
        self.assertEqual(classify_error(exc), ("Bad token", "401"))

    def test_structured_body_without_text_falls_back_to_exception_message(self):
        exc = ApiError("Request failed with status code 500", 500, {})
        self.assertEqual(classify_error(exc), ("Request failed with status code 500", "500"))

    def test_plain_exception_uses_request_error_code(self):
        self.assertEqual(classify_error(ValueError("boom")), ("boom", "REQUEST_ERROR"))

    def test_nothing_extractable(self):
        self.assertEqual(classify_error(RuntimeError()), ("Unknown error occurred", "UNKNOWN_ERROR"))


if __name__ == "__main__":
    unittest.main()
