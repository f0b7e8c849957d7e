from fastapi import Request

from app.infra.llm import BaseLLMClient, get_llm_client
from app.infra.store import ProgressStore


def get_store(request: Request) -> ProgressStore:
    """lifespan에서 생성한 저장소"""
    return request.app.state.store


def get_llm() -> BaseLLMClient | None:
    """설정된 LLM 클라이언트, 미설정이면 None"""
    return get_llm_client()
