from abc import ABC, abstractmethod

from langchain_core.language_models import BaseChatModel


class BaseLLMClient(ABC):
    """LLM 클라이언트 추상 클래스"""

    provider: str = ""

    @abstractmethod
    def get_chat_model(self) -> BaseChatModel:
        """LangChain 호환 채팅 모델 반환"""
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """사용 중인 모델 이름 반환"""
        pass
