"""FastAPI dependencies resolving services from the app's container."""

from __future__ import annotations

from fastapi import Request

from ..services import ChatService, HeritagePlannerService


def get_planner(request: Request) -> HeritagePlannerService:
    return request.app.state.container.resolve(HeritagePlannerService)


def get_chat(request: Request) -> ChatService:
    return request.app.state.container.resolve(ChatService)
