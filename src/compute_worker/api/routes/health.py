"""
健康检查路由
"""

from fastapi import APIRouter, Request, Response

from compute_worker import __version__

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    健康检查端点

    Returns:
        服务状态信息
    """
    return {
        "status": "healthy",
        "service": "compute-worker",
        "version": __version__
    }


@router.get("/health/ready")
async def readiness_check(request: Request):
    """
    就绪检查端点

    返回当前连接的执行器数量
    """
    executors = getattr(request.app.state, "executors", set())
    return {
        "status": "ready",
        "connections": len(executors),
        "activeTasks": sum(executor.get_task_count() for executor in executors),
    }


@router.get("/health/live")
async def liveness_check():
    """
    存活检查端点

    用于 Kubernetes 等容器编排系统
    """
    return Response(status_code=200)
