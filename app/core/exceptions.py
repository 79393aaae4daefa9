# app/core/exceptions.py
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from app.core.logger import logger


class DiaryHubError(HTTPException):
    """도메인 오류 기본 클래스

    kind는 실패 종류(validation, not_found, ...)를 나타내며
    응답 본문에 detail과 함께 실린다.
    """

    kind = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, status_code: int | None = None, headers: dict | None = None):
        super().__init__(status_code=status_code or self.status_code, detail=detail, headers=headers)


class ValidationFailed(DiaryHubError):
    """필수 값 누락/형식 오류 (변경 전에 거부)"""
    kind = "validation"
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthorized(DiaryHubError):
    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "인증 정보가 올바르지 않습니다"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(DiaryHubError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(DiaryHubError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(DiaryHubError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class DependencyFailure(DiaryHubError):
    """첨부 저장소 업로드/삭제 실패"""
    kind = "dependency_failure"
    status_code = status.HTTP_502_BAD_GATEWAY


async def handle_diaryhub_error(request: Request, exc: DiaryHubError) -> JSONResponse:
    """도메인 오류 → {kind, detail} 응답"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} - {exc.kind}: {exc.detail}")
    else:
        logger.info(f"{request.method} {request.url.path} - {exc.kind}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"kind": exc.kind, "detail": exc.detail},
        headers=exc.headers,
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """예상하지 못한 오류는 내부 정보 없이 500으로"""
    logger.opt(exception=exc).error(f"{request.method} {request.url.path} - 처리되지 않은 오류")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"kind": "internal", "detail": "서버 오류가 발생했습니다"},
    )
