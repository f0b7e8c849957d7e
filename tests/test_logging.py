"""로깅 프로세서 테스트"""

from unittest.mock import patch

from app.core.context import clear_context, set_request_id, set_user_id
from app.core.logging import _mask, add_context_processor, mask_sensitive_processor


class TestMask:
    """_mask 함수 테스트"""

    def test_bearer_token(self):
        assert _mask("Authorization: Bearer abc.def.ghi") == "Authorization: Bearer ***"

    def test_database_password(self):
        """DB URL 비밀번호 마스킹"""
        assert _mask("postgres://app:s3cret@db:5432/rank") == "postgres://app:***@db:5432/rank"

    def test_github_token(self):
        assert _mask("token ghp_" + "a" * 36) == "token ***"

    def test_nested_values(self):
        """dict, list 안의 문자열도 마스킹"""
        result = _mask({"headers": ["Bearer xyz"], "count": 3})
        assert result == {"headers": ["Bearer ***"], "count": 3}


class TestProcessors:
    """structlog 프로세서 테스트"""

    def test_context_injected(self):
        """request_id, user_id 자동 주입"""
        set_request_id("req12345")
        set_user_id("user-1")
        try:
            event = add_context_processor(None, "info", {"event": "hello"})
        finally:
            clear_context()

        assert event["request_id"] == "req12345"
        assert event["user_id"] == "user-1"

    def test_explicit_value_wins(self):
        """직접 넘긴 user_id가 우선"""
        set_user_id("user-1")
        try:
            event = add_context_processor(None, "info", {"event": "hello", "user_id": "user-2"})
        finally:
            clear_context()

        assert event["user_id"] == "user-2"

    def test_masking_only_in_production(self):
        """개발 환경에서는 마스킹하지 않음"""
        event = {"event": "token=abc"}
        with patch("app.core.logging.settings") as mock_settings:
            mock_settings.is_production = False
            assert mask_sensitive_processor(None, "info", dict(event)) == event

            mock_settings.is_production = True
            assert mask_sensitive_processor(None, "info", dict(event)) == {"event": "token=***"}
