"""模拟计算API - QASS / WebAVALIA 评分与互评矩阵编辑。"""

from fastapi import APIRouter, Depends, HTTPException, Query

from gpa_api.dependencies import get_simulation_service
from gpa_api.matrix.generator import InfeasibleConstraintError, InvalidBoundsError
from gpa_api.models.enums import ScaleType
from gpa_api.schemas.simulation import (
    GroupSizeLimits,
    GroupSizeLimitsRequest,
    QASSSimulationRequest,
    QASSSimulationResponse,
    RandomMatrixRequest,
    RandomMatrixResponse,
    RandomWeightsRequest,
    RandomWeightsResponse,
    ResizeRequest,
    ResizeResponse,
    ScaleDefaults,
    ValidationReport,
    WebAvaliaRandomRequest,
    WebAvaliaSimulationRequest,
    WebAvaliaSimulationResponse,
)
from gpa_api.services.scoring_client import ScoringServiceError
from gpa_api.services.simulation import MatrixValidationError, SimulationService

router = APIRouter()


def _unprocessable(exc: ValueError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(exc))


# === 评分 ===

@router.post("/qass", response_model=QASSSimulationResponse)
def calculate_qass(
    payload: QASSSimulationRequest,
    service: SimulationService = Depends(get_simulation_service),
) -> QASSSimulationResponse:
    try:
        return service.calculate_qass(payload)
    except MatrixValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=exc.report.model_dump(),
        ) from exc
    except ScoringServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.post("/webavalia", response_model=WebAvaliaSimulationResponse)
def calculate_webavalia(
    payload: WebAvaliaSimulationRequest,
    service: SimulationService = Depends(get_simulation_service),
) -> WebAvaliaSimulationResponse:
    try:
        return service.calculate_webavalia(payload)
    except MatrixValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=exc.report.model_dump(),
        ) from exc
    except ScoringServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.post("/qass/check", response_model=ValidationReport)
def check_qass(
    payload: QASSSimulationRequest,
    service: SimulationService = Depends(get_simulation_service),
) -> ValidationReport:
    """只校验，不调用评分引擎。"""
    return service.check_qass(payload)


@router.post("/webavalia/check", response_model=ValidationReport)
def check_webavalia(
    payload: WebAvaliaSimulationRequest,
    service: SimulationService = Depends(get_simulation_service),
) -> ValidationReport:
    return service.check_webavalia(payload)


# === 互评矩阵编辑 ===

@router.post("/peer-matrix/random", response_model=RandomMatrixResponse)
def random_peer_matrix(
    payload: RandomMatrixRequest,
    service: SimulationService = Depends(get_simulation_service),
) -> RandomMatrixResponse:
    try:
        return service.random_matrix(payload)
    except (InfeasibleConstraintError, InvalidBoundsError) as exc:
        raise _unprocessable(exc) from exc


@router.post("/peer-matrix/webavalia-random", response_model=RandomMatrixResponse)
def random_webavalia_matrix(
    payload: WebAvaliaRandomRequest,
    service: SimulationService = Depends(get_simulation_service),
) -> RandomMatrixResponse:
    try:
        return service.random_webavalia_matrix(payload)
    except InfeasibleConstraintError as exc:
        raise _unprocessable(exc) from exc


@router.post("/peer-matrix/resize", response_model=ResizeResponse)
def resize_peer_matrix(
    payload: ResizeRequest,
    service: SimulationService = Depends(get_simulation_service),
) -> ResizeResponse:
    """添加或移除学生，超出 2-10 人范围时保持不变。"""
    return service.resize(payload)


@router.post("/weights/random", response_model=RandomWeightsResponse)
def random_student_weights(
    payload: RandomWeightsRequest,
    service: SimulationService = Depends(get_simulation_service),
) -> RandomWeightsResponse:
    return service.random_weights(payload)


@router.get("/scale-defaults", response_model=ScaleDefaults)
def get_scale_defaults(
    scale_type: ScaleType = Query(..., description="评分量表"),
    service: SimulationService = Depends(get_simulation_service),
) -> ScaleDefaults:
    return service.scale_defaults(scale_type)


@router.post("/group-size-limits", response_model=GroupSizeLimits)
def get_group_size_limits(
    payload: GroupSizeLimitsRequest,
    service: SimulationService = Depends(get_simulation_service),
) -> GroupSizeLimits:
    """总分约束下允许的组员人数范围。"""
    return service.group_size_limits(payload)
