"""Tests for the inference endpoint and its prompt context."""

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from sproutify.api.v1.ai import router
from sproutify.core.config import settings
from sproutify.models.ai_usage import AIUsageLog
from sproutify.models.tower import TowerVitals
from sproutify.schemas.ai import AIChatContext, AIChatRequest, AIChatResponse
from sproutify.services.ai_service import (
    AIService,
    build_context,
    build_educational_prompt,
    estimate_tokens,
    grade_level_prompt,
)

AUTH = {"Authorization": f"Bearer {settings.AI_CHAT_TOKEN}"}
BODY = {"message": "How is my tower?", "towerId": 1, "studentName": "Ava", "selectedSources": ["vital-1"]}


@pytest.fixture
def client() -> TestClient:
    """Create a test client with only the AI router mounted."""
    app = FastAPI()
    app.include_router(router)
    return TestClient(app)


class TestAIChatEndpoint:
    """Tests for POST /api/v1/ai/chat."""

    def test_requires_token(self, client: TestClient) -> None:
        """Missing or wrong bearer token is rejected."""
        assert client.post("/api/v1/ai/chat", json=BODY).status_code == 401
        assert client.post("/api/v1/ai/chat", json=BODY, headers={"Authorization": "Bearer nope"}).status_code == 401

    def test_missing_fields(self, client: TestClient) -> None:
        """Missing message, tower or student is a 400 with an error body."""
        response = client.post("/api/v1/ai/chat", json={"message": "hi"}, headers=AUTH)
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "required" in response.json()["error"]

    def test_success(self, client: TestClient) -> None:
        """A reply is wrapped with the tower context."""
        result = AIChatResponse(response="Looking good!", context=AIChatContext(towerName="Tower A", sourcesUsed=1))
        with patch.object(AIService, "chat", AsyncMock(return_value=result)):
            response = client.post("/api/v1/ai/chat", json=BODY, headers=AUTH)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "response": "Looking good!",
            "context": {"towerName": "Tower A", "sourcesUsed": 1},
        }

    def test_unexpected_failure(self, client: TestClient) -> None:
        """Model failures are a 500 with an error body."""
        with patch.object(AIService, "chat", AsyncMock(side_effect=RuntimeError("model offline"))):
            response = client.post("/api/v1/ai/chat", json=BODY, headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "model offline"}


class TestPromptContext:
    """Tests for the tower context and prompt."""

    def test_only_selected_records(self) -> None:
        """Records are included only when their source id was selected."""
        tower = SimpleNamespace(name="Tower A", ports=28, created_at=datetime(2024, 1, 1))
        records = {
            "vitals": [
                SimpleNamespace(id=1, ph=6.0, ec=1.2, created_at=datetime(2024, 2, 1)),
                SimpleNamespace(id=2, ph=7.5, ec=2.0, created_at=datetime(2024, 2, 2)),
            ],
            "plantings": [SimpleNamespace(id=1, name="Basil", port_number=1, status="seeded",
                                          seeded_at=None, planted_at=None, created_at=datetime(2024, 1, 5))],
        }

        context = build_context(tower, records, ["vital-2", "plant-1", "planting-1", "bogus"])

        assert [v["id"] for v in context["vitals"]] == [2]
        assert [p["name"] for p in context["plantings"]] == ["Basil"]
        assert context["harvests"] == []
        assert context["tower"]["name"] == "Tower A"

    def test_grade_level_guidelines(self) -> None:
        """Unknown grade levels fall back to 3-5."""
        assert grade_level_prompt("K-2").startswith("Use simple words")
        assert grade_level_prompt(None) == grade_level_prompt("3-5")
        assert grade_level_prompt("college") == grade_level_prompt("3-5")

    def test_prompt_mentions_student_and_question(self) -> None:
        """The student, tower and question all reach the prompt."""
        context = {"tower": {"name": "Tower A", "ports": 28, "created_at": None}}
        prompt = build_educational_prompt(context, "Why is pH important?", "Ava", "6-8")
        assert "Student: Ava" in prompt
        assert "Tower A (28 ports)" in prompt
        assert prompt.rstrip().endswith("STUDENT QUESTION: Why is pH important?\n\nRESPONSE:")

    def test_estimate_tokens(self) -> None:
        """Four characters per token, rounded up."""
        assert estimate_tokens("") == 0
        assert estimate_tokens("abcde") == 2


class TestAIService:
    """Tests for AIService.chat against the database."""

    @pytest.mark.asyncio
    async def test_chat_logs_usage(self, tower) -> None:
        """A successful chat writes one usage row."""
        vitals = await TowerVitals.create(tower=tower, ph=6.2, ec=1.5)
        request = AIChatRequest(message="pH?", towerId=tower.id, studentName="Ava",
                                selectedSources=[f"vital-{vitals.id}"])

        with patch.object(AIService, "complete", AsyncMock(return_value="Your pH is 6.2.")) as complete:
            result = await AIService.chat(request)

        assert result.response == "Your pH is 6.2."
        assert result.context.towerName == "Tower A"
        assert "6.2" in complete.await_args.args[0]

        usage = await AIUsageLog.get(tower_id=tower.id)
        assert usage.sources_used == 1
        assert usage.total_tokens == usage.prompt_tokens + usage.response_tokens
        assert usage.estimated_cost == pytest.approx(usage.total_tokens * 0.0000025)

    @pytest.mark.asyncio
    async def test_usage_log_failure_is_ignored(self, tower) -> None:
        """A broken usage table never breaks the reply."""
        request = AIChatRequest(message="hi", towerId=tower.id, studentName="Ava")

        with patch.object(AIService, "complete", AsyncMock(return_value="Hello!")), \
                patch.object(AIUsageLog, "create", AsyncMock(side_effect=RuntimeError("table locked"))):
            result = await AIService.chat(request)

        assert result.response == "Hello!"
