"""应用配置管理。

使用 Pydantic Settings 统一读取环境变量，便于在本地/生产之间切换。
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """核心配置项。

    - ``scoring_api_url``：外部评分引擎（QASS / WebAVALIA）的地址。
    - ``max_allocation_steps``：约束矩阵随机分配的迭代上限。
    - ``random_seed``：固定随机种子，便于复现演示数据。
    """

    scoring_api_url: str = Field(
        default="http://localhost:3000", description="评分引擎 API 地址"
    )
    scoring_api_timeout: float = Field(default=10.0, description="评分请求超时（秒）")
    log_level: str = Field(default="INFO", description="日志级别")
    log_file: Optional[Path] = Field(default=None, description="日志文件，空则只输出到控制台")
    min_group_size: int = Field(default=2, ge=2)
    max_group_size: int = Field(default=10, ge=2)
    default_group_size: int = Field(default=5, ge=2)
    max_allocation_steps: int = Field(
        default=100_000, gt=0, description="单个评分者分配循环的最大迭代次数"
    )
    random_seed: Optional[int] = Field(default=None, description="随机种子")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    model_config = {
        "env_prefix": "GPA_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """缓存后的全局配置实例。"""

    return Settings()
