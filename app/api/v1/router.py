# app/api/v1/router.py
from fastapi import APIRouter

from .endpoints import analytics, assets, chat_cache, documents, embeddings, events, health, sections, themes

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(documents.router, tags=["documents"])
api_router.include_router(sections.router, tags=["sections"])
api_router.include_router(embeddings.router, tags=["embeddings"])
api_router.include_router(assets.router, tags=["assets"])
api_router.include_router(chat_cache.router, tags=["chat-cache"])
api_router.include_router(analytics.router, tags=["analytics"])
api_router.include_router(themes.router, tags=["themes"])
api_router.include_router(events.router, tags=["events"])
