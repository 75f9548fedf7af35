"""
易宿酒店预订平台 主应用入口
"""
from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from yisu import __version__
from yisu.config import settings
from yisu.database import init_db
from yisu.exceptions import AppError
from yisu.logging_config import setup_logging
from yisu.routers import auth, hotels, public_hotels, public_orders
from yisu.services.event_handlers import register_event_handlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    setup_logging(settings.LOG_LEVEL)
    init_db()
    register_event_handlers()
    logger.info(f"{settings.APP_NAME} {__version__} started")

    yield


# 创建应用
app = FastAPI(
    title="易宿酒店预订平台",
    description="商户录入酒店、管理员审核发布、游客检索与预订",
    version=__version__,
    lifespan=lifespan
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============== 异常处理 ==============

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    message = "; ".join(f"{e['field']}: {e['message']}" if e["field"] else e["message"] for e in errors)
    return JSONResponse(
        status_code=400,
        content={"message": message or "Validation failed", "code": "ValidationError", "details": {"errors": errors}},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail), "code": "HTTPException"},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "code": "InternalError"},
    )


# 注册路由
app.include_router(auth.router)
app.include_router(hotels.router)
app.include_router(public_hotels.router)
app.include_router(public_orders.router)


@app.get("/")
def root():
    """根路径"""
    return {
        "name": settings.APP_NAME,
        "version": __version__,
        "description": "酒店预订平台后端"
    }


@app.get("/health")
def health_check():
    """健康检查"""
    return {"status": "healthy"}
