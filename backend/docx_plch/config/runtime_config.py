"""
运行期配置 - 读取 config/runtime.yaml

职责：
- 加载工作区/文档部件/版面默认值/匹配参数
- 提供环境变量覆盖机制
- 类型安全的配置访问
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

DEFAULT_CONFIG_PATH = Path("config/runtime.yaml")


class WorkspaceConfig(BaseModel):
    """工作区配置"""

    base_dir: Path | None = None  # None 表示系统临时目录
    prefix: str = "docx_plch_"


class DocumentConfig(BaseModel):
    """文档部件配置"""

    primary_part: str = "word/document.xml"
    encoding: str = "utf-8"


class LayoutDefaultsConfig(BaseModel):
    """版面默认值（单位：磅）"""

    page_width: float = 612.0
    page_height: float = 792.0
    margin_top: float = 72.0
    margin_bottom: float = 72.0
    margin_left: float = 72.0
    margin_right: float = 72.0
    line_height: float = 14.4


class MappingConfig(BaseModel):
    """坐标估算参数"""

    font_size: float = 12.0
    char_width_ratio: float = 0.6
    line_height_ratio: float = 1.2


class MatchingConfig(BaseModel):
    """占位符匹配配置"""

    max_span_factor: int = 10
    escape_values: bool = True


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    document: DocumentConfig = Field(default_factory=DocumentConfig)
    layout_defaults: LayoutDefaultsConfig = Field(default_factory=LayoutDefaultsConfig)
    mapping: MappingConfig = Field(default_factory=MappingConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "DOCX_PLCH_",
        "env_nested_delimiter": "__",
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        runtime_opts = data.get("runtime_options", {}) or {}

        config = cls(
            workspace=WorkspaceConfig(**cls._extract(runtime_opts, "workspace")),
            document=DocumentConfig(**cls._extract(runtime_opts, "document")),
            layout_defaults=LayoutDefaultsConfig(**cls._extract(runtime_opts, "layout_defaults")),
            mapping=MappingConfig(**cls._extract(runtime_opts, "mapping")),
            matching=MatchingConfig(**cls._extract(runtime_opts, "matching")),
            logging=LoggingConfig(**cls._extract(runtime_opts, "logging")),
        )

        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置（丢弃值为null的项，保留模型默认值）"""
        section = data.get(key, {}) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                v = v["default"]
            elif isinstance(v, dict):
                continue
            if v is not None:
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """解析相对路径配置为绝对路径（基于配置文件所在目录）"""
        if self.workspace.base_dir and not self.workspace.base_dir.is_absolute():
            self.workspace.base_dir = (base_dir / self.workspace.base_dir).resolve()


# 全局配置实例
_config: RuntimeConfig | None = None


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        default_path = DEFAULT_CONFIG_PATH
        if not default_path.exists():
            fallback_path = Path(__file__).resolve().parents[3] / DEFAULT_CONFIG_PATH
            if fallback_path.exists():
                default_path = fallback_path
        _config = RuntimeConfig.from_yaml(default_path)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    path = yaml_path or DEFAULT_CONFIG_PATH
    _config = RuntimeConfig.from_yaml(path)
    return _config
