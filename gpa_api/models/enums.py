"""评分模型相关枚举定义 - QASS 模式、评分量表、评估模型。"""

import enum


class QASSMode(str, enum.Enum):
    """QASS 模式。

    决定互评只能提高、只能降低还是可升可降小组分数。
    """
    BIJUNCTION = "Bijunction"    # 奖惩皆可，对角线自由
    CONJUNCTION = "Conjunction"  # 仅奖励，自评固定为 1
    DISJUNCTION = "Disjunction"  # 仅惩罚，自评固定为 0


class ScaleType(str, enum.Enum):
    """评分量表。"""
    PERCENTAGE = "Percentage Scale"  # 连续值，保留两位小数
    N_POINT = "N-Point Scale"        # 整数分值


class AssessmentModel(str, enum.Enum):
    """评估模型。"""
    QASS = "1"
    WEBAVALIA = "2"


# 各模式下对角线（自评）的固定值，Bijunction 不固定
FIXED_DIAGONAL = {
    QASSMode.CONJUNCTION: 1,
    QASSMode.DISJUNCTION: 0,
}
