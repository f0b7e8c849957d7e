"""
Bearer JWT 기반 사용자 식별

신원 확인은 외부 인증 제공자(Supabase 등)가 발급한 토큰의 서명 검증만 수행한다.
"""

from fastapi import Header, Request
from jose import JWTError, jwt

from app.core.config import settings
from app.core.context import set_user_id
from app.core.exceptions import UnauthorizedError
from app.core.logging import get_logger

logger = get_logger(__name__)


def _extract_bearer_token(authorization: str | None) -> str | None:
    """Authorization 헤더에서 토큰 추출"""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def decode_user_id(token: str) -> str:
    """토큰 검증 후 sub 클레임(user_id) 반환

    Raises:
        UnauthorizedError: 시크릿 미설정, 서명/만료/audience 오류, sub 누락
    """
    if not settings.auth_jwt_secret:
        raise UnauthorizedError("AUTH_JWT_SECRET이 설정되지 않았습니다")

    try:
        payload = jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
            audience=settings.auth_jwt_audience or None,
            options={"verify_aud": bool(settings.auth_jwt_audience)},
        )
    except JWTError as e:
        logger.warning("토큰 검증 실패 error=%s", type(e).__name__)
        raise UnauthorizedError("유효하지 않은 토큰입니다") from e

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("토큰에 sub 클레임이 없습니다")
    return str(user_id)


async def get_current_user_id(
    request: Request,
    authorization: str | None = Header(default=None),
) -> str:
    """인증된 user_id를 반환하는 FastAPI 의존성"""
    token = _extract_bearer_token(authorization)
    if token is None:
        raise UnauthorizedError("Authorization 헤더가 없습니다")

    user_id = decode_user_id(token)
    request.state.user_id = user_id
    set_user_id(user_id)
    return user_id
