"""API 路由包入口。"""

from fastapi import APIRouter

from gpa_api.api import simulation

router = APIRouter(prefix="/api")

# 注册子路由
router.include_router(simulation.router, prefix="/simulation", tags=["模拟"])
