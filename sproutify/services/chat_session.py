import asyncio
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

import requests
from fastapi import HTTPException

from sproutify.core.config import settings
from sproutify.core.logger import ai_logger, db_logger
from sproutify.models.document import TowerDocument
from sproutify.schemas.notebook import ChatMessageOut
from sproutify.services.output_service import random_file_path, text_data_url
from sproutify.services.source_service import SourceSelection

CONNECTION_ERROR_MESSAGE = "Sorry, I'm having trouble connecting right now. Please try again later."

SUGGESTED_QUESTIONS = [
    "How is my tower performing overall?",
    "What should I focus on this week?",
    "Are there any issues I should be aware of?",
]


class InferenceError(Exception):
    pass


class InferenceClient:
    """Client for the ai-chat inference endpoint."""

    def __init__(self, url: str = None, token: str = None, timeout: int = None):
        self.url = url or settings.AI_CHAT_URL
        self.token = token or settings.AI_CHAT_TOKEN
        self.timeout = timeout or settings.AI_CHAT_TIMEOUT

    def post(self, payload: dict) -> str:
        response = requests.post(
            self.url,
            json=payload,
            headers={"Authorization": f"Bearer {self.token}"},
            timeout=self.timeout,
        )

        try:
            data = response.json()
        except ValueError:
            raise InferenceError(f"Inference endpoint returned {response.status_code} without JSON")

        if not response.ok:
            raise InferenceError(data.get("error") or "Failed to get AI response")

        reply = data.get("response")
        if not isinstance(reply, str):
            raise InferenceError("Inference endpoint returned no response text")
        return reply

    async def ask(self, payload: dict) -> str:
        return await asyncio.to_thread(self.post, payload)


class ChatState(str, Enum):
    IDLE = "idle"
    AWAITING_REPLY = "awaiting-reply"


def flatten_transcript(messages: List[ChatMessageOut]) -> str:
    return "\n\n".join(
        f"{'Student' if m.role == 'user' else 'Assistant'}: {m.content}"
        for m in messages
    )


class ChatSession:
    """
    One student's notebook chat on one tower.

    The transcript is append-only. While a reply is pending the session is
    ``awaiting-reply``: further submits are ignored but the draft can still be
    edited. Transport failures end up in the transcript as an assistant message.
    """

    def __init__(
            self,
            tower_id: int,
            student_name: str,
            grade_level: str = "3-5",
            selection: SourceSelection = None,
            client: InferenceClient = None,
    ):
        self.tower_id = tower_id
        self.student_name = student_name
        self.grade_level = grade_level
        self.selection = selection or SourceSelection()
        self.client = client or InferenceClient()
        self.messages: List[ChatMessageOut] = []
        self.state = ChatState.IDLE
        self.draft = ""

    @property
    def is_awaiting(self) -> bool:
        return self.state == ChatState.AWAITING_REPLY

    def set_draft(self, text: str):
        self.draft = text or ""

    def append(self, role: str, content: str) -> ChatMessageOut:
        message = ChatMessageOut(
            id=uuid.uuid4().hex,
            role=role,
            content=content,
            timestamp=datetime.now(timezone.utc),
        )
        self.messages.append(message)
        return message

    def build_payload(self, text: str) -> dict:
        return {
            "message": text,
            "towerId": self.tower_id,
            "studentName": self.student_name,
            "selectedSources": self.selection.ids(),
            "gradeLevel": self.grade_level,
        }

    def begin(self, text: str = None) -> Optional[ChatMessageOut]:
        """Record the student's message and start waiting. None when ignored."""
        text = self.draft if text is None else text
        if not text.strip() or self.is_awaiting:
            return None

        message = self.append("user", text)
        self.draft = ""
        self.state = ChatState.AWAITING_REPLY
        return message

    async def submit(self, text: str = None) -> Optional[ChatMessageOut]:
        """Send ``text`` (or the draft). Returns the assistant message, None when ignored."""
        message = self.begin(text)
        if message is None:
            return None
        return await self.finish(message.content)

    async def finish(self, text: str) -> ChatMessageOut:
        try:
            reply = await self.client.ask(self.build_payload(text))
        except Exception as e:
            ai_logger.log_error(f"chat_submit tower={self.tower_id}", e)
            reply = CONNECTION_ERROR_MESSAGE
        finally:
            self.state = ChatState.IDLE

        return self.append("assistant", reply)

    async def save(self, teacher_id: Optional[int]) -> TowerDocument:
        """Store the transcript as a new tower document, once per call."""
        if not self.messages:
            raise HTTPException(status_code=400, detail="Nothing to save yet")
        if not teacher_id:
            raise HTTPException(status_code=400, detail="No teacher ID found. Please refresh and try again.")

        today = datetime.now().strftime("%m/%d/%Y")
        title = f"Chat Notes - {today}"
        text = flatten_transcript(self.messages)

        try:
            doc = await TowerDocument.create(
                tower_id=self.tower_id,
                teacher_id=teacher_id,
                title=title,
                description=f"Chat conversation saved on {today}",
                output_type="study-guide",
                content=text,
                file_name=f"{title}.txt",
                file_path=random_file_path("chat-notes"),
                file_url=text_data_url(text),
                file_size=len(text),
                file_type="text/plain",
            )
        except Exception as e:
            db_logger.log_error("save_chat", e)
            raise HTTPException(status_code=500, detail="Failed to save chat to note. Please try again.")

        db_logger.log_create("TowerDocument", {
            "id": doc.id,
            "tower_id": self.tower_id,
            "title": title,
            "messages": len(self.messages)
        })
        return doc
