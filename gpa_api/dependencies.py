"""FastAPI 依赖注入工具。"""

from fastapi import Depends

from gpa_api.config import Settings, get_settings
from gpa_api.services.scoring_client import ScoringClient
from gpa_api.services.simulation import SimulationService


def get_scoring_client(settings: Settings = Depends(get_settings)) -> ScoringClient:
    """FastAPI 依赖，用于获取评分引擎客户端。"""

    return ScoringClient(settings)


def get_simulation_service(
    settings: Settings = Depends(get_settings),
    client: ScoringClient = Depends(get_scoring_client),
) -> SimulationService:
    return SimulationService(settings, client)
