from app.core.config import settings
from app.core.logging import get_logger
from app.infra.llm.base import BaseLLMClient
from app.infra.llm.gemini_client import GeminiClient
from app.infra.llm.openai_client import OpenAIClient
from app.infra.llm.vllm_client import VLLMClient

logger = get_logger(__name__)

_PROVIDERS: dict[str, type[BaseLLMClient]] = {
    "openai": OpenAIClient,
    "vllm": VLLMClient,
    "gemini": GeminiClient,
}

_client: BaseLLMClient | None = None
_initialized = False


def get_llm_client() -> BaseLLMClient | None:
    """설정된 LLM 클라이언트 반환

    프로바이더가 비어 있거나 키가 없으면 None. 호출자는 None을 폴백 신호로 취급한다.
    """
    global _client, _initialized

    if _initialized:
        return _client

    provider = settings.llm_provider.strip().lower()
    client_class = _PROVIDERS.get(provider)

    if not provider:
        logger.info("LLM 프로바이더 미설정, 폴백 퀘스트 사용")
    elif client_class is None:
        logger.warning("지원하지 않는 LLM 프로바이더: %s", provider)
    else:
        try:
            _client = client_class()
            logger.info("LLM 클라이언트 초기화 provider=%s model=%s", provider, _client.get_model_name())
        except ValueError as e:
            logger.warning("LLM 클라이언트 초기화 실패 provider=%s error=%s", provider, e)

    _initialized = True
    return _client


def reset_clients() -> None:
    """클라이언트 캐시 초기화 - 테스트용"""
    global _client, _initialized
    _client = None
    _initialized = False
