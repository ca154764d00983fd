"""Request/response contracts for the simulation endpoints.

The request models mirror the form validation of the simulation page so that
invalid configurations are rejected before anything reaches the scoring
engine. Fields use snake_case; ``to_scoring_payload`` renders the camelCase
body the external engine expects.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, NonNegativeInt, conint, field_validator, model_validator

from gpa_api.matrix.shape import MAX_GROUP_SIZE, MIN_GROUP_SIZE, is_square
from gpa_api.matrix.validation import (
    validate_bounds,
    validate_constraint_conflict,
    validate_score_constraint,
)
from gpa_api.models.enums import AssessmentModel, QASSMode, ScaleType

Vote = conint(ge=0, le=100)


def _nan_to_none(matrix: Any) -> Any:
    if not isinstance(matrix, list):
        return matrix
    return [
        [None if isinstance(cell, float) and math.isnan(cell) else cell for cell in row]
        if isinstance(row, list)
        else row
        for row in matrix
    ]


def _check_matrix_shape(matrix: List[List[Any]]) -> None:
    if not MIN_GROUP_SIZE <= len(matrix) <= MAX_GROUP_SIZE:
        raise ValueError(
            f"Group size must be between {MIN_GROUP_SIZE} and {MAX_GROUP_SIZE}"
        )
    if not is_square(matrix):
        raise ValueError("Peer matrix must be square")


# === Simulation requests ===

class QASSSimulationRequest(BaseModel):
    mode: QASSMode
    polishing_factor: float = Field(gt=0, lt=0.5, allow_inf_nan=False)
    peer_rating_impact: float = Field(ge=0, allow_inf_nan=False)
    group_spread: float = Field(gt=0, lt=1, allow_inf_nan=False)
    weights: List[NonNegativeInt]
    group_score: float = Field(gt=0, lt=1, allow_inf_nan=False)
    scale_type: ScaleType
    lower_bound: float = Field(allow_inf_nan=False)
    upper_bound: float = Field(allow_inf_nan=False)
    is_total_score_constrained: bool = False
    score_constraint: Optional[float] = Field(default=None, gt=0, le=100, allow_inf_nan=False)
    peer_matrix: List[List[Optional[float]]]

    @field_validator("peer_matrix", mode="before")
    @classmethod
    def _normalize_missing(cls, value: Any) -> Any:
        return _nan_to_none(value)

    @model_validator(mode="after")
    def _check_consistency(self) -> "QASSSimulationRequest":
        _check_matrix_shape(self.peer_matrix)
        if len(self.weights) != self.group_size:
            raise ValueError("Each student needs exactly one weight")
        if not validate_bounds(self.lower_bound, self.upper_bound):
            raise ValueError("Lower bound must be less than upper bound")
        if not validate_score_constraint(self.is_total_score_constrained, self.score_constraint):
            raise ValueError("Constraint is required")
        if not validate_constraint_conflict(
            self.lower_bound,
            self.upper_bound,
            self.group_size,
            self.is_total_score_constrained,
            self.score_constraint,
        ):
            raise ValueError("Constraint conflicts with lower or upper bound")
        return self

    @property
    def group_size(self) -> int:
        return len(self.peer_matrix)

    @property
    def active_constraint(self) -> Optional[float]:
        return self.score_constraint if self.is_total_score_constrained else None

    def to_scoring_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "mode": self.mode.value,
            "polishingFactor": self.polishing_factor,
            "peerRatingImpact": self.peer_rating_impact,
            "groupSpread": self.group_spread,
            "groupProductScore": self.group_score,
            "peerRatingWeights": list(self.weights),
            "scaleType": self.scale_type.value,
            "lowerBound": self.lower_bound,
            "upperBound": self.upper_bound,
            "isTotalScoreConstrained": self.is_total_score_constrained,
            "peerMatrix": [list(row) for row in self.peer_matrix],
        }
        if self.is_total_score_constrained:
            payload["scoreConstraint"] = self.score_constraint
        return payload


class WebAvaliaSimulationRequest(BaseModel):
    self_weight: float = Field(ge=0, le=1, allow_inf_nan=False)
    peer_weight: Optional[float] = Field(default=None, ge=0, le=1, allow_inf_nan=False)
    group_grade: float = Field(ge=0, le=20, allow_inf_nan=False)
    peer_matrix: List[List[Optional[Vote]]]

    @field_validator("peer_matrix", mode="before")
    @classmethod
    def _normalize_missing(cls, value: Any) -> Any:
        return _nan_to_none(value)

    @model_validator(mode="after")
    def _check_shape(self) -> "WebAvaliaSimulationRequest":
        _check_matrix_shape(self.peer_matrix)
        if self.peer_weight is None:
            # 未填写时按自评权重平均分配给其余组员
            self.peer_weight = (1 - self.self_weight) / (len(self.peer_matrix) - 1)
        return self

    def to_scoring_payload(self) -> Dict[str, Any]:
        return {
            "selfWeight": self.self_weight,
            "groupGrade": self.group_grade,
            "peerMatrix": [list(row) for row in self.peer_matrix],
            "peerWeight": self.peer_weight,
        }


# === Scoring engine responses ===

class StudentScore(BaseModel):
    student: Optional[Union[str, int]] = None
    rating: Optional[float] = None
    contribution: Optional[float] = None
    score: Optional[float] = None


class MeanScore(BaseModel):
    rating: Optional[float] = None
    contribution: Optional[float] = None
    score: Optional[float] = None


class QASSSimulationResponse(BaseModel):
    student_scores: List[StudentScore] = Field(
        default_factory=list,
        validation_alias=AliasChoices("student_scores", "studentScores"),
    )
    mean: Optional[MeanScore] = None


class StudentGrade(BaseModel):
    student: Optional[Union[str, int]] = None
    score: Optional[float] = None


class WebAvaliaMeanScore(BaseModel):
    score: Optional[float] = None


class WebAvaliaSimulationResponse(BaseModel):
    student_grades: List[StudentGrade] = Field(
        default_factory=list,
        validation_alias=AliasChoices("student_grades", "studentGrades"),
    )
    mean: Optional[WebAvaliaMeanScore] = None


class ValidationReport(BaseModel):
    valid: bool
    field_errors: Dict[str, str] = Field(default_factory=dict)
    matrix_error: Optional[str] = None


# === Peer matrix editing helpers ===

class RandomMatrixRequest(BaseModel):
    group_size: Optional[int] = Field(default=None, ge=MIN_GROUP_SIZE, le=MAX_GROUP_SIZE)
    mode: QASSMode = QASSMode.BIJUNCTION
    scale_type: ScaleType = ScaleType.PERCENTAGE
    lower_bound: float = Field(allow_inf_nan=False)
    upper_bound: float = Field(allow_inf_nan=False)
    is_total_score_constrained: bool = False
    score_constraint: Optional[float] = Field(default=None, allow_inf_nan=False)
    seed: Optional[int] = None


class WebAvaliaRandomRequest(BaseModel):
    group_size: Optional[int] = Field(default=None, ge=MIN_GROUP_SIZE, le=MAX_GROUP_SIZE)
    seed: Optional[int] = None


class RandomMatrixResponse(BaseModel):
    peer_matrix: List[List[float]]
    column_sums: List[float]


class ResizeRequest(BaseModel):
    peer_matrix: List[List[Optional[float]]]
    weights: List[NonNegativeInt] = Field(default_factory=list)
    new_size: int
    mode: Optional[QASSMode] = None

    @field_validator("peer_matrix", mode="before")
    @classmethod
    def _normalize_missing(cls, value: Any) -> Any:
        return _nan_to_none(value)


class ResizeResponse(BaseModel):
    group_size: int
    peer_matrix: List[List[Optional[float]]]
    weights: List[int]


class RandomWeightsRequest(BaseModel):
    group_size: Optional[int] = Field(default=None, ge=MIN_GROUP_SIZE, le=MAX_GROUP_SIZE)
    seed: Optional[int] = None


class RandomWeightsResponse(BaseModel):
    weights: List[int]


class ScaleDefaults(BaseModel):
    scale_type: ScaleType
    lower_bound: float
    upper_bound: float
    score_constraint: float
    is_total_score_constrained: bool = False


class GroupSizeLimitsRequest(BaseModel):
    model: AssessmentModel = AssessmentModel.QASS
    lower_bound: float = Field(allow_inf_nan=False)
    upper_bound: float = Field(allow_inf_nan=False)
    is_total_score_constrained: bool = False
    score_constraint: Optional[float] = Field(default=None, allow_inf_nan=False)


class GroupSizeLimits(BaseModel):
    """总分约束下可行的组员人数范围；``None`` 表示不受限。"""

    min_group_size: Optional[int] = None
    max_group_size: Optional[int] = None
    valid: bool = True
    message: Optional[str] = None
