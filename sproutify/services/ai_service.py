import json
import math
from typing import Dict, Iterable, List, Optional

from openai import AsyncOpenAI

from sproutify.core.config import settings
from sproutify.core.logger import ai_logger
from sproutify.models.ai_usage import AIUsageLog
from sproutify.models.harvest import Harvest, WasteLog
from sproutify.models.pest import PestLog
from sproutify.models.planting import Planting
from sproutify.models.tower import Tower, TowerPhoto, TowerVitals
from sproutify.schemas.ai import AIChatContext, AIChatRequest, AIChatResponse
from sproutify.services.source_service import parse_source_id

COST_PER_TOKEN = 0.0000025

GRADE_LEVEL_PROMPTS = {
    "K-2": "Use simple words and short sentences. Focus on colors, shapes, and basic concepts. "
           "Use lots of encouragement.",
    "3-5": "Use age-appropriate vocabulary. Include simple explanations of scientific concepts. "
           "Ask follow-up questions.",
    "6-8": "Use more complex vocabulary. Include scientific reasoning and cause-and-effect relationships.",
    "9-12": "Use advanced vocabulary. Include detailed scientific explanations and analysis.",
}

# context key, source type, model, fields sent to the model
CONTEXT_TABLES = [
    ("vitals", "vitals", TowerVitals, ["id", "ph", "ec", "created_at"]),
    ("plantings", "plant", Planting, ["id", "name", "port_number", "status", "seeded_at", "planted_at", "created_at"]),
    ("harvests", "harvest", Harvest, ["id", "plant_name", "weight_grams", "destination", "created_at"]),
    ("photos", "photo", TowerPhoto, ["id", "caption", "created_at"]),
    ("pest_logs", "pest", PestLog, ["id", "pest", "severity", "notes", "action", "resolved", "created_at"]),
    ("waste_logs", "waste", WasteLog, ["id", "plant_name", "grams", "notes", "created_at"]),
]

_client: Optional[AsyncOpenAI] = None


class AIRequestError(Exception):
    """Bad inference request, reported as a 400."""


def get_llm_client() -> AsyncOpenAI:
    global _client
    if _client is None:
        _client = AsyncOpenAI(base_url=settings.LLM_BASE_URL, api_key=settings.LLM_API_KEY or "missing")
    return _client


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text) / 4)


def grade_level_prompt(grade_level: Optional[str]) -> str:
    return GRADE_LEVEL_PROMPTS.get(grade_level, GRADE_LEVEL_PROMPTS["3-5"])


def selected_ids(selected_sources: Iterable[str]) -> Dict[str, set]:
    by_type: Dict[str, set] = {}
    for value in selected_sources:
        parsed = parse_source_id(value)
        if parsed:
            by_type.setdefault(parsed[0], set()).add(parsed[1])
    return by_type


def build_context(tower: Tower, records: Dict[str, list], selected_sources: List[str]) -> dict:
    wanted = selected_ids(selected_sources)
    context = {
        "tower": {
            "name": tower.name or "Unknown Tower",
            "ports": tower.ports or 0,
            "created_at": tower.created_at,
        }
    }
    for key, source_type, _, fields in CONTEXT_TABLES:
        ids = wanted.get(source_type, set())
        context[key] = [
            {f: getattr(row, f, None) for f in fields}
            for row in records.get(key, [])
            if row.id in ids
        ]
    return context


def build_educational_prompt(context: dict, message: str, student_name: str, grade_level: Optional[str]) -> str:
    tower = context["tower"]
    return f"""You are an AI research assistant helping students explore their hydroponic tower data.

STUDENT CONTEXT:
- Student: {student_name}
- Grade Level: {grade_level or 'Elementary'}
- Tower: {tower['name']} ({tower['ports']} ports)

EDUCATIONAL GUIDELINES:
{grade_level_prompt(grade_level)}

TOWER DATA CONTEXT:
{json.dumps(context, indent=2, default=str)}

INSTRUCTIONS:
1. Answer the student's question using the tower data provided
2. Use age-appropriate language and explanations
3. Encourage scientific thinking and observation
4. If data is missing, suggest what the student could observe or measure
5. Connect findings to broader scientific concepts when appropriate
6. Be encouraging and supportive

STUDENT QUESTION: {message}

RESPONSE:"""


class AIService:

    @staticmethod
    async def load_records(tower_id: int) -> Dict[str, list]:
        records = {}
        for key, _, model, _ in CONTEXT_TABLES:
            records[key] = await model.filter(tower_id=tower_id).order_by("-created_at")
        return records

    @staticmethod
    async def complete(prompt: str) -> str:
        response = await get_llm_client().chat.completions.create(
            model=settings.LLM_MODEL,
            messages=[{"role": "user", "content": prompt}],
            temperature=settings.LLM_TEMPERATURE,
            max_tokens=settings.LLM_MAX_TOKENS,
        )
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ValueError("Invalid response from the language model")
        return content

    @staticmethod
    async def log_usage(request: AIChatRequest, prompt: str, reply: str):
        prompt_tokens = estimate_tokens(prompt)
        response_tokens = estimate_tokens(reply)
        total = prompt_tokens + response_tokens
        cost = total * COST_PER_TOKEN

        try:
            await AIUsageLog.create(
                tower_id=request.towerId,
                student_name=request.studentName,
                prompt_tokens=prompt_tokens,
                response_tokens=response_tokens,
                total_tokens=total,
                estimated_cost=cost,
                message=request.message,
                sources_used=len(request.selectedSources),
            )
            ai_logger.log_usage(request.towerId, prompt_tokens, response_tokens, cost)
        except Exception as e:
            # usage tracking never breaks the chat
            ai_logger.log_error("log_usage", e)

    @classmethod
    async def chat(cls, request: AIChatRequest) -> AIChatResponse:
        if not request.message or not request.towerId or not request.studentName:
            raise AIRequestError("Message, tower ID, and student name are required.")

        tower = await Tower.get_or_none(id=request.towerId)
        if not tower:
            raise AIRequestError(f"Tower {request.towerId} not found")

        ai_logger.log_request(request.towerId, request.studentName, len(request.selectedSources), request.gradeLevel)

        records = await cls.load_records(tower.id)
        context = build_context(tower, records, request.selectedSources)
        prompt = build_educational_prompt(context, request.message, request.studentName, request.gradeLevel)

        reply = await cls.complete(prompt)
        await cls.log_usage(request, prompt, reply)

        return AIChatResponse(
            response=reply,
            context=AIChatContext(towerName=tower.name, sourcesUsed=len(request.selectedSources)),
        )
