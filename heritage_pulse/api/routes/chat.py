"""
api/routes/chat.py
------------------
POST   /api/chat/message
GET    /api/chat/{conversation_id}
DELETE /api/chat/{conversation_id}
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ...services import ChatService
from ..dependencies import get_chat
from ..schemas import ChatRequest

router = APIRouter()


@router.post("/message", summary="Ask the heritage guide")
def send_message(body: ChatRequest, chat: ChatService = Depends(get_chat)) -> dict:
    return {"success": True, "data": chat.send(body.message, body.conversation_id)}


@router.get("/{conversation_id}", summary="Conversation history")
def history(conversation_id: str, chat: ChatService = Depends(get_chat)) -> dict:
    messages = chat.history(conversation_id)
    return {
        "success": True,
        "data": {
            "conversation_id": conversation_id,
            "messages": [m.to_dict() for m in messages],
            "count": len(messages),
        },
    }


@router.delete("/{conversation_id}", summary="Forget a conversation")
def clear(conversation_id: str, chat: ChatService = Depends(get_chat)) -> dict:
    return {
        "success": True,
        "data": {"conversation_id": conversation_id, "cleared": chat.clear(conversation_id)},
    }
