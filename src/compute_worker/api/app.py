#!/usr/bin/env python3
"""
FastAPI 应用工厂

创建和配置 FastAPI 应用实例
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from compute_worker import __version__
from compute_worker.config.settings import settings
from compute_worker.config.logging import setup_logging
from compute_worker.tasks.processor import Command

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # —— 应用启动时执行 ——
    logger.info("Starting Compute Worker API...")
    app.state.executors = set()
    logger.info("Compute Worker API startup complete")

    yield

    # —— 应用关闭时执行 ——
    logger.info("Shutting down Compute Worker API...")
    for executor in list(app.state.executors):
        await executor.shutdown()
    app.state.executors.clear()
    logger.info("Compute Worker API shutdown complete")


def create_app() -> FastAPI:
    """
    创建 FastAPI 应用实例

    Returns:
        配置完成的 FastAPI 应用
    """
    log_settings = settings().logging
    server_settings = settings().server

    # 设置日志
    setup_logging(
        level=log_settings.level,
        log_file=log_settings.log_file,
        format_string=log_settings.format,
    )

    app = FastAPI(
        lifespan=lifespan,
        title=server_settings.title,
        description=server_settings.description,
        version=server_settings.version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # 添加 CORS 中间件
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 注册异常处理器
    _register_exception_handlers(app)

    # 注册路由
    _register_routes(app)

    return app


def _register_exception_handlers(app: FastAPI):
    """注册全局异常处理器"""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.error(f"Validation error: {exc}")
        return JSONResponse(
            status_code=422,
            content={"detail": exc.errors()}
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        logger.error(f"HTTP error: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail}
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unexpected error: {str(exc)}")
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )


def _register_routes(app: FastAPI):
    """注册路由"""
    from compute_worker.api.routes import health, worker

    # 健康检查路由
    app.include_router(health.router, tags=["Health"])

    # 任务通道路由
    app.include_router(worker.router, tags=["Worker"])

    # 根路由
    @app.get("/")
    async def root():
        """服务信息"""
        return {
            "message": "Compute Worker API",
            "version": __version__,
            "supportedCommands": [command.value for command in Command],
            "docs": "/docs",
        }
