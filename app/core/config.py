from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """애플리케이션 설정"""

    environment: str = "development"

    # LLM 프로바이더 선택: "openai", "vllm", "gemini" 또는 "" (미설정 시 폴백 사용)
    llm_provider: str = ""

    # OpenAI 설정
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_timeout: float = 30.0

    # vLLM/Groq 등 OpenAI 호환 엔드포인트
    vllm_api_url: str = ""
    vllm_api_key: str = ""
    vllm_model: str = ""
    vllm_timeout: float = 60.0

    # Gemini 설정
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_timeout: float = 30.0

    llm_temperature: float = 0.7

    # GitHub
    github_token: str = ""
    github_timeout: float = 10.0

    # 저장소 - 비어 있으면 인메모리 저장소 사용
    database_url: str = ""
    database_echo: bool = False

    # 인증 (Supabase 호환 JWT)
    auth_jwt_secret: str = ""
    auth_jwt_algorithm: str = "HS256"
    auth_jwt_audience: str = "authenticated"

    # 요청 제한
    rate_limit_default: str = "60/minute"
    rate_limit_submit: str = "10/minute"

    # 로깅 설정
    log_level: str = "INFO"

    # CORS 설정
    cors_allowed_origins: str = ""

    # Langfuse 설정
    langfuse_public_key: str = ""
    langfuse_secret_key: str = ""
    langfuse_base_url: str = "https://cloud.langfuse.com"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    def validate_for_production(self) -> list[str]:
        """프로덕션 환경에서 필수 설정 검증 후 누락된 항목 반환"""
        errors = []
        if not self.database_url:
            errors.append("DATABASE_URL")
        if not self.auth_jwt_secret:
            errors.append("AUTH_JWT_SECRET")
        return errors

    @model_validator(mode="after")
    def validate_production_settings(self):
        """프로덕션 환경에서 필수 설정 검증"""
        if self.is_production:
            missing = self.validate_for_production()
            if missing:
                raise ValueError(f"프로덕션 환경에서 필수 설정 누락: {', '.join(missing)}")
        return self


settings = Settings()
