"""
Tests: HTTP API.

Run with:
    pytest reqlint/tests/test_api.py -v
"""

import time

from fastapi.testclient import TestClient

from reqlint.api import create_app

client = TestClient(create_app())

DOCUMENTS = {
    "general/design.md": (
        "# Auth\n"
        '{% include requirement/MUST id="general-auth" %} support tokens.\n'
    ),
    "python/design.md": (
        '{% include requirement/SHOULD id="general-auth" %} duplicate.\n'
        "[auth](../general/design.md#auth)\n"
    ),
}


class TestHealth:
    def test_health(self):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestLintEndpoint:
    def test_lint_reports_duplicates(self):
        response = client.post("/api/lint", json={"documents": DOCUMENTS})
        assert response.status_code == 200
        body = response.json()
        assert [v["rule"] for v in body["violations"]] == ["duplicate_id"]
        assert body["violations"][0]["document"] == "python/design.md"
        assert body["summary"]["requirements"] == 2

    def test_lint_with_inline_config(self):
        response = client.post(
            "/api/lint",
            json={"documents": DOCUMENTS, "config": {"disabled_rules": ["duplicate_id"]}},
        )
        assert response.status_code == 200
        assert response.json()["violations"] == []

    def test_unclosed_liquid_link_returns_promptly(self):
        started = time.perf_counter()
        response = client.post(
            "/api/lint",
            json={"documents": {"a.md": "[a](" + "{{x}}" * 40 + " y\n"}},
        )
        assert response.status_code == 200
        assert time.perf_counter() - started < 5.0

    def test_empty_documents_rejected(self):
        response = client.post("/api/lint", json={"documents": {}})
        assert response.status_code == 422

    def test_bad_path_rejected(self):
        response = client.post("/api/lint", json={"documents": {"../x.md": "# x"}})
        assert response.status_code == 422

    def test_invalid_config_rejected(self):
        response = client.post(
            "/api/lint",
            json={"documents": DOCUMENTS, "config": {"keywords": ["SHALL"]}},
        )
        assert response.status_code == 422


class TestIndexEndpoint:
    def test_index(self):
        response = client.post("/api/index", json={"documents": DOCUMENTS})
        assert response.status_code == 200
        ids = [(e["requirement_id"], e["document"]) for e in response.json()]
        assert ids == [
            ("general-auth", "general/design.md"),
            ("general-auth", "python/design.md"),
        ]
