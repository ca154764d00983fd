"""评分领域枚举统一导出。"""

from gpa_api.models.enums import FIXED_DIAGONAL, AssessmentModel, QASSMode, ScaleType

__all__ = [
    "AssessmentModel",
    "FIXED_DIAGONAL",
    "QASSMode",
    "ScaleType",
]
