"""生成随机互评矩阵并打印，用于准备演示数据。"""
import argparse
import random
import sys
from pathlib import Path

# 添加项目根目录到 path
sys.path.insert(0, str(Path(__file__).parent.parent))

from gpa_api.matrix.generator import (
    GenerationParams,
    InfeasibleConstraintError,
    InvalidBoundsError,
    generate_matrix,
    generate_webavalia_matrix,
)
from gpa_api.matrix.validation import column_sum
from gpa_api.models.enums import QASSMode, ScaleType


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Print a random peer matrix")
    parser.add_argument("--size", type=int, default=5, help="group size (2-10)")
    parser.add_argument("--mode", choices=[m.value for m in QASSMode], default=QASSMode.BIJUNCTION.value)
    parser.add_argument("--scale", choices=["percentage", "n-point"], default="percentage")
    parser.add_argument("--lower", type=float, default=None)
    parser.add_argument("--upper", type=float, default=None)
    parser.add_argument("--constraint", type=float, default=None, help="column total")
    parser.add_argument("--webavalia", action="store_true", help="WebAVALIA votes (sum 100)")
    parser.add_argument("--seed", type=int, default=None)
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    rng = random.Random(args.seed)

    try:
        if args.webavalia:
            matrix = generate_webavalia_matrix(args.size, rng)
        else:
            scale = ScaleType.PERCENTAGE if args.scale == "percentage" else ScaleType.N_POINT
            default_lower, default_upper = (0, 1) if scale == ScaleType.PERCENTAGE else (1, 5)
            params = GenerationParams(
                group_size=args.size,
                lower_bound=default_lower if args.lower is None else args.lower,
                upper_bound=default_upper if args.upper is None else args.upper,
                mode=QASSMode(args.mode),
                scale_type=scale,
                score_constraint=args.constraint,
            )
            matrix = generate_matrix(params, rng)
    except (InfeasibleConstraintError, InvalidBoundsError) as exc:
        print(f"错误: {exc}", file=sys.stderr)
        return 1

    for row in matrix:
        print("  ".join(f"{cell:>6g}" for cell in row))
    print("-" * 8 * len(matrix))
    print("  ".join(f"{column_sum(matrix, j):>6g}" for j in range(len(matrix))))
    return 0


if __name__ == "__main__":
    sys.exit(main())
