import asyncio

from fastapi import APIRouter, WebSocket, Depends, Query
from starlette import status
from starlette.websockets import WebSocketDisconnect

from sproutify.core.logger import ws_logger
from sproutify.models.tower import Tower
from sproutify.services.chat_session import SUGGESTED_QUESTIONS, ChatSession
from sproutify.services.kiosk_service import KioskService
from sproutify.services.notebook_manager import NotebookConnectionManager
from sproutify.services.source_service import SourceAggregator, SourceSelection

router = APIRouter(prefix="/api/v1/ws", tags=["Notebook"])

notebook_manager = NotebookConnectionManager()


def state_event(chat: ChatSession) -> dict:
    return {"type": "state", "state": chat.state.value, "draft": chat.draft}


def sources_event(chat: ChatSession) -> dict:
    return {"type": "sources", "selected": chat.selection.ids()}


async def deliver_reply(websocket: WebSocket, chat: ChatSession, text: str):
    try:
        reply = await chat.finish(text)
        await websocket.send_json({"type": "message", "message": reply.model_dump(mode="json")})
        await websocket.send_json(state_event(chat))
    except Exception as e:
        ws_logger.log_error("deliver_reply", e)


@router.websocket("/notebook/{tower_id}")
async def notebook_ws(
        websocket: WebSocket,
        tower_id: int,
        session: str = Query(...),
        kiosk: KioskService = Depends(),
):
    await websocket.accept()

    kiosk_session = await kiosk.get(session)
    tower = await Tower.get_or_none(id=tower_id)
    if not kiosk_session or not tower or tower.teacher_id != kiosk_session.teacher_id_for_tower:
        ws_logger.logger.error(f"Rejected notebook connection for tower {tower_id}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    ws_logger.log_connect(kiosk_session.student_name, tower_id)

    sources = await SourceAggregator().collect(tower_id)
    chat = ChatSession(
        tower_id=tower_id,
        student_name=kiosk_session.student_name,
        grade_level=kiosk_session.grade_level,
        selection=SourceSelection(sources),
    )
    pending = set()

    await notebook_manager.add(tower_id, websocket)
    await websocket.send_json({
        "type": "sources",
        "sources": [s.model_dump(mode="json") for s in sources],
        "selected": chat.selection.ids(),
        "suggested_questions": SUGGESTED_QUESTIONS,
    })

    try:
        while True:
            data = await websocket.receive_json()
            action = data.get("action")

            ws_logger.log_message(action, {
                "tower_id": tower_id,
                "student": kiosk_session.student_name,
            })

            if action == "send_message":
                message = chat.begin(data.get("text"))
                if message is None:
                    await websocket.send_json(state_event(chat))
                    continue

                await websocket.send_json({"type": "message", "message": message.model_dump(mode="json")})
                await websocket.send_json(state_event(chat))

                # the reply is awaited in the background so drafts keep flowing
                task = asyncio.create_task(deliver_reply(websocket, chat, message.content))
                pending.add(task)
                task.add_done_callback(pending.discard)

            elif action == "draft":
                chat.set_draft(data.get("text", ""))
                await websocket.send_json(state_event(chat))

            elif action == "toggle_source":
                chat.selection.toggle(data.get("id", ""))
                await websocket.send_json(sources_event(chat))

            elif action == "select_all_sources":
                if data.get("selected", True):
                    chat.selection.select_all()
                else:
                    chat.selection.clear()
                await websocket.send_json(sources_event(chat))

            elif action == "save_chat":
                try:
                    doc = await chat.save(kiosk_session.teacher_id_for_tower)
                    await websocket.send_json({"type": "saved", "document_id": doc.id, "title": doc.title})
                    await notebook_manager.broadcast(tower_id, {"type": "outputs_changed"})
                except Exception as e:
                    ws_logger.log_error("save_chat", e)
                    await websocket.send_json({
                        "type": "error",
                        "message": getattr(e, "detail", None) or "Failed to save chat to note. Please try again."
                    })

            elif action == "history":
                await websocket.send_json({
                    "type": "history",
                    "messages": [m.model_dump(mode="json") for m in chat.messages],
                    "state": chat.state.value,
                })

            else:
                await websocket.send_json({"type": "error", "message": f"Unknown action: {action}"})

    except WebSocketDisconnect:
        ws_logger.log_disconnect(kiosk_session.student_name, tower_id)
    except Exception as e:
        ws_logger.log_error("notebook_loop", e)
    finally:
        for task in pending:
            task.cancel()
        await notebook_manager.remove(tower_id, websocket)
