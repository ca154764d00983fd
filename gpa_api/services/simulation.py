"""Simulation service functions.

校验模拟页提交的配置与互评矩阵，通过后转发给外部评分引擎；同时提供
随机矩阵、随机权重与矩阵扩缩等编辑辅助功能。
"""

from __future__ import annotations

import logging
import random
from typing import Dict, Optional

from gpa_api.config import Settings
from gpa_api.matrix.generator import (
    GenerationParams,
    InfeasibleConstraintError,
    InvalidBoundsError,
    generate_matrix,
    generate_webavalia_matrix,
    random_weights,
)
from gpa_api.matrix.shape import resize, resize_weights, set_diagonal
from gpa_api.matrix.validation import (
    calculate_max_group_size,
    calculate_min_group_size,
    check_bound_fields,
    check_peer_matrix,
    check_webavalia_matrix,
    column_sum,
    validate_group_size_conflict,
)
from gpa_api.models.enums import FIXED_DIAGONAL, AssessmentModel, ScaleType
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
from gpa_api.services.scoring_client import ScoringClient

logger = logging.getLogger(__name__)

_SCALE_DEFAULTS: Dict[ScaleType, ScaleDefaults] = {
    ScaleType.PERCENTAGE: ScaleDefaults(
        scale_type=ScaleType.PERCENTAGE, lower_bound=0, upper_bound=1, score_constraint=1
    ),
    ScaleType.N_POINT: ScaleDefaults(
        scale_type=ScaleType.N_POINT, lower_bound=1, upper_bound=5, score_constraint=20
    ),
}


class MatrixValidationError(ValueError):
    """Carries the validation report of a rejected simulation request."""

    def __init__(self, report: ValidationReport) -> None:
        self.report = report
        message = report.matrix_error or "; ".join(report.field_errors.values())
        super().__init__(message or "Invalid simulation input")


class SimulationService:
    """封装模拟计算的校验、转发与矩阵编辑逻辑。"""

    def __init__(
        self,
        settings: Settings,
        client: ScoringClient,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.settings = settings
        self.client = client
        self.rng = rng or random.Random(settings.random_seed)

    def _rng_for(self, seed: Optional[int]) -> random.Random:
        return random.Random(seed) if seed is not None else self.rng

    # === Validation ===

    def check_qass(self, request: QASSSimulationRequest) -> ValidationReport:
        field_errors = check_bound_fields(
            request.mode,
            request.scale_type,
            request.lower_bound,
            request.upper_bound,
            request.is_total_score_constrained,
            request.score_constraint,
        )
        if field_errors:
            return ValidationReport(valid=False, field_errors=field_errors)

        matrix_error = check_peer_matrix(
            request.peer_matrix,
            request.lower_bound,
            request.upper_bound,
            request.scale_type,
            request.active_constraint,
        )
        return ValidationReport(valid=matrix_error is None, matrix_error=matrix_error)

    def check_webavalia(self, request: WebAvaliaSimulationRequest) -> ValidationReport:
        matrix_error = check_webavalia_matrix(request.peer_matrix)
        return ValidationReport(valid=matrix_error is None, matrix_error=matrix_error)

    # === Scoring ===

    def calculate_qass(self, request: QASSSimulationRequest) -> QASSSimulationResponse:
        report = self.check_qass(request)
        if not report.valid:
            logger.info("Rejected QASS simulation: %s", report.model_dump(exclude_none=True))
            raise MatrixValidationError(report)
        data = self.client.calculate_qass(request.to_scoring_payload())
        return QASSSimulationResponse.model_validate(data)

    def calculate_webavalia(self, request: WebAvaliaSimulationRequest) -> WebAvaliaSimulationResponse:
        report = self.check_webavalia(request)
        if not report.valid:
            logger.info("Rejected WebAVALIA simulation: %s", report.matrix_error)
            raise MatrixValidationError(report)
        data = self.client.calculate_webavalia(request.to_scoring_payload())
        return WebAvaliaSimulationResponse.model_validate(data)

    # === Peer matrix editing ===

    def _group_size(self, requested: Optional[int]) -> int:
        return requested or self.settings.default_group_size

    def random_matrix(self, request: RandomMatrixRequest) -> RandomMatrixResponse:
        if request.is_total_score_constrained and request.score_constraint is None:
            raise InfeasibleConstraintError("Constraint is required")
        field_errors = check_bound_fields(
            request.mode,
            request.scale_type,
            request.lower_bound,
            request.upper_bound,
            request.is_total_score_constrained,
            request.score_constraint,
        )
        if field_errors:
            raise InvalidBoundsError("; ".join(field_errors.values()))

        params = GenerationParams(
            group_size=self._group_size(request.group_size),
            lower_bound=request.lower_bound,
            upper_bound=request.upper_bound,
            mode=request.mode,
            scale_type=request.scale_type,
            score_constraint=request.score_constraint if request.is_total_score_constrained else None,
        )
        matrix = generate_matrix(
            params, self._rng_for(request.seed), self.settings.max_allocation_steps
        )
        return self._matrix_response(matrix)

    def random_webavalia_matrix(self, request: WebAvaliaRandomRequest) -> RandomMatrixResponse:
        matrix = generate_webavalia_matrix(
            self._group_size(request.group_size),
            self._rng_for(request.seed),
            self.settings.max_allocation_steps,
        )
        return self._matrix_response(matrix)

    def _matrix_response(self, matrix) -> RandomMatrixResponse:
        sums = [round(column_sum(matrix, j), 6) for j in range(len(matrix))]
        return RandomMatrixResponse(peer_matrix=matrix, column_sums=sums)

    def resize(self, request: ResizeRequest) -> ResizeResponse:
        if not self.settings.min_group_size <= request.new_size <= self.settings.max_group_size:
            # 超出范围时保持原样
            return ResizeResponse(
                group_size=len(request.peer_matrix),
                peer_matrix=request.peer_matrix,
                weights=list(request.weights),
            )

        matrix = resize(request.peer_matrix, request.new_size, self.settings.max_group_size)
        fixed = FIXED_DIAGONAL.get(request.mode) if request.mode else None
        if fixed is not None:
            matrix = set_diagonal(matrix, fixed)
        weights = resize_weights(request.weights, request.new_size)
        return ResizeResponse(group_size=request.new_size, peer_matrix=matrix, weights=weights)

    def random_weights(self, request: RandomWeightsRequest) -> RandomWeightsResponse:
        return RandomWeightsResponse(
            weights=random_weights(self._group_size(request.group_size), self._rng_for(request.seed))
        )

    def group_size_limits(self, request: GroupSizeLimitsRequest) -> GroupSizeLimits:
        """总分约束决定的最少与最多组员人数；WebAVALIA 或无约束时不受限。"""
        if request.model != AssessmentModel.QASS or not request.is_total_score_constrained:
            return GroupSizeLimits()

        min_size = calculate_min_group_size(request.score_constraint, request.upper_bound)
        max_size = calculate_max_group_size(request.score_constraint, request.lower_bound)
        valid = (
            min_size is None
            or max_size is None
            or validate_group_size_conflict(True, min_size, max_size)
        )
        return GroupSizeLimits(
            min_group_size=min_size,
            max_group_size=max_size,
            valid=valid,
            message=None if valid else "Constraint conflicts with lower or upper bound",
        )

    def scale_defaults(self, scale_type: ScaleType) -> ScaleDefaults:
        return _SCALE_DEFAULTS[scale_type].model_copy()
