"""
Integration tests for the HTTP API.

The embedding and generation APIs are replaced by in-process fakes; the
rest of the stack (routing, validation, store, index, error handlers) is real.
"""

import pytest

from oneplace.chat.prompts import DONT_KNOW_ANSWER
from oneplace.exceptions import EmbeddingError, GenerationError

OFFER_SECTION = "Offer policy: a student may hold only one offer at a time. " * 17
STIPEND_SECTION = "Stipend policy: the stipend is set by the company. " * 20
POLICY_TEXT = OFFER_SECTION + STIPEND_SECTION


def ingest(client, text=POLICY_TEXT, version="2024-25"):
    return client.post("/api/ingest", json={"text": text, "version": version})


@pytest.mark.integration
class TestIngestEndpoint:

    def test_ingest(self, api_client, policy_store):
        response = ingest(api_client)

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["version"] == "2024-25"
        assert body["ingestedChunks"] == len(policy_store.get_chunks())
        assert body["ingestedChunks"] > 1

    def test_ingest_generates_version(self, api_client, policy_store):
        response = api_client.post("/api/ingest", json={"text": "Offer rules."})

        body = response.json()
        assert response.status_code == 200
        assert body["version"].startswith("v")
        assert policy_store.get_version() == body["version"]

    def test_ingest_keeps_empty_version(self, api_client, policy_store):
        response = ingest(api_client, text="Offer rules.", version="")

        assert response.json()["version"] == ""
        assert api_client.get("/api/policy").json()["version"] == ""

    @pytest.mark.parametrize("payload", [{}, {"text": ""}, {"text": "   "}, {"version": "v1"}])
    def test_ingest_without_text(self, api_client, payload):
        response = api_client.post("/api/ingest", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": "No text provided."}

    def test_ingest_malformed_body(self, api_client):
        response = api_client.post(
            "/api/ingest",
            content="not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request body")

    def test_ingest_embedding_failure(self, api_client, fake_embedder):
        async def fail(texts):
            raise EmbeddingError("Embedding API error: 403 API key not valid")

        fake_embedder.aembed_texts = fail

        response = ingest(api_client)

        assert response.status_code == 500
        assert response.json() == {"error": "Embedding API error: 403 API key not valid"}

    def test_ingest_unexpected_failure(self, api_client, fake_embedder):
        async def fail(texts):
            raise RuntimeError("socket closed")

        fake_embedder.aembed_texts = fail

        response = ingest(api_client)

        assert response.status_code == 500
        assert response.json() == {"error": "socket closed"}


@pytest.mark.integration
class TestChatEndpoint:

    def test_chat_answers(self, api_client, fake_llm):
        ingest(api_client)

        response = api_client.post("/api/chat", json={"question": "How many offers can I hold?"})

        assert response.status_code == 200
        body = response.json()
        assert body["answer"] == "A student may accept one offer.\nSources: [1]"
        assert body["sources"][0]["sourceIndex"] == 1
        assert body["sources"][0]["id"].startswith("p-")
        assert body["sources"][0]["score"] == pytest.approx(1.0, abs=1e-5)
        assert len(body["sources"]) <= 5
        assert len(fake_llm.prompts) == 1

    def test_chat_declines_unrelated_question(self, api_client, fake_llm):
        ingest(api_client)

        response = api_client.post("/api/chat", json={"question": "Where is the library?"})

        assert response.status_code == 200
        assert response.json() == {"answer": DONT_KNOW_ANSWER, "sources": []}
        assert fake_llm.prompts == []

    def test_chat_before_ingest(self, api_client):
        response = api_client.post("/api/chat", json={"question": "offer?"})

        assert response.status_code == 400
        assert response.json() == {"error": "No policy ingested. Use admin to ingest first."}

    @pytest.mark.parametrize("payload", [{}, {"question": ""}, {"question": "  "}])
    def test_chat_without_question(self, api_client, payload):
        ingest(api_client)

        response = api_client.post("/api/chat", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": "No question provided"}

    def test_chat_generation_failure(self, api_client, fake_llm):
        ingest(api_client)

        def fail(prompt):
            raise GenerationError("Generation API error: 500 internal")

        fake_llm.invoke = fail

        response = api_client.post("/api/chat", json={"question": "offer?"})

        assert response.status_code == 500
        assert response.json() == {"error": "Generation API error: 500 internal"}

    def test_reingest_changes_answers(self, api_client):
        ingest(api_client)
        ingest(api_client, text="Attendance policy: seventy five percent attendance.", version="v2")

        response = api_client.post("/api/chat", json={"question": "offer?"})

        assert response.json()["answer"] == DONT_KNOW_ANSWER


@pytest.mark.integration
class TestStatusEndpoints:

    def test_health_before_ingest(self, api_client):
        response = api_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["policy_loaded"] is False

    def test_health_after_ingest(self, api_client):
        ingest(api_client)

        assert api_client.get("/health").json()["policy_loaded"] is True

    def test_health_skips_upstream_by_default(self, api_client, fake_llm):
        fake_llm.healthy = (False, "Connection failed: refused")

        body = api_client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["upstream_ok"] is None

    def test_health_upstream_ok(self, api_client):
        body = api_client.get("/health", params={"upstream": "true"}).json()

        assert body["status"] == "healthy"
        assert body["upstream_ok"] is True
        assert "healthy" in body["upstream_message"]

    def test_health_upstream_failure_is_degraded(self, api_client, fake_llm):
        fake_llm.healthy = (False, "HTTP 403: Forbidden")

        response = api_client.get("/health", params={"upstream": "true"})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["upstream_ok"] is False
        assert body["upstream_message"] == "HTTP 403: Forbidden"

    def test_policy_status(self, api_client):
        assert api_client.get("/api/policy").json() == {"version": None, "chunks": 0}

        body = ingest(api_client).json()

        assert api_client.get("/api/policy").json() == {
            "version": "2024-25",
            "chunks": body["ingestedChunks"],
        }

    def test_cors_headers(self, api_client):
        response = api_client.options(
            "/api/chat",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers
