"""FastAPI 入口，挂载模拟计算路由并初始化日志。"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gpa_api.api import router as api_router
from gpa_api.config import get_settings
from gpa_api.utils.logger import setup_logger


def create_app() -> FastAPI:
    """应用工厂，便于后续测试与拓展路由。"""

    settings = get_settings()
    logger = setup_logger(settings.log_level, settings.log_file)

    app = FastAPI(title="GPA Simulation API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "scoring_api": settings.scoring_api_url}

    logger.info("Scoring engine at %s", settings.scoring_api_url)
    return app


app = create_app()
