# main.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import os

from app.config import settings
from app.database import Base, engine
from app.models import user, diary  # noqa: F401  테이블 등록
from app.api.routes import auth, diaries
from app.core.exceptions import DiaryHubError, handle_diaryhub_error, handle_unexpected_error
from app.core.logging_middleware import log_requests
from app.core.logger import logger

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug
)

# ===== 로깅 미들웨어 =====
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    return await log_requests(request, call_next)

# 요청 크기 제한 (이미지 10장 x 20MB + 폼)
MAX_REQUEST_SIZE = 210 * 1024 * 1024

@app.middleware("http")
async def limit_upload_size(request: Request, call_next):
    """요청 크기 제한"""
    if request.method in ["POST", "PUT", "PATCH"]:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > MAX_REQUEST_SIZE:
            return JSONResponse(
                status_code=413,
                content={
                    "kind": "validation",
                    "detail": f"요청 크기가 너무 큽니다. 최대: {MAX_REQUEST_SIZE // 1024 // 1024}MB"
                }
            )
    return await call_next(request)

# ===== 오류 응답 =====
app.add_exception_handler(DiaryHubError, handle_diaryhub_error)
app.add_exception_handler(Exception, handle_unexpected_error)

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """요청 형식 오류도 validation으로 통일"""
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    return JSONResponse(
        status_code=400,
        content={"kind": "validation", "detail": f"요청 값이 올바르지 않습니다: {', '.join(fields)}"}
    )

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 라우터 등록
app.include_router(auth.router)
app.include_router(diaries.router)

# 업로드 이미지 서빙
os.makedirs(settings.upload_dir, exist_ok=True)
app.mount(settings.upload_url_prefix, StaticFiles(directory=settings.upload_dir), name="uploads")

@app.on_event("startup")
async def startup_event():
    Base.metadata.create_all(bind=engine)
    logger.info("DiaryHub API 서버 시작")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("DiaryHub API 서버 종료")

@app.get("/health")
def health_check():
    """헬스체크"""
    return {
        "status": "healthy",
        "service": settings.app_name
    }
