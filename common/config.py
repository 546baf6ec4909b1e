from __future__ import annotations

from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings

CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "config.yaml"


class AppConfig(BaseModel):
    database_url: str = "sqlite:///data/docsync.db"
    show_progress: bool = True


class ChunkingConfig(BaseModel):
    chunk_size: int = 2000
    chunk_overlap: int = 200
    separators: List[str] = Field(default_factory=lambda: ["\n\n", "\n", ". ", " ", ""])

    @model_validator(mode="after")
    def _check_sizes(self) -> "ChunkingConfig":
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError("chunk_overlap must be >= 0 and smaller than chunk_size")
        return self


class SynthesisConfig(BaseModel):
    min_content_length: int = 30


class LLMConfig(BaseModel):
    provider: str = "ollama"
    model_name: str = "mistral"
    temperature: float = 0.2
    max_attempts: int = Field(default=1, ge=1)


class FilesConfig(BaseModel):
    valid_exts: List[str] = Field(
        default_factory=lambda: [
            ".py", ".js", ".ts", ".jsx", ".tsx", ".java",
            ".go", ".c", ".cpp", ".h", ".hpp",
        ]
    )
    ignore_patterns: List[str] = Field(
        default_factory=lambda: [
            "node_modules", ".git", ".next", "build",
            "dist", "coverage", "__pycache__",
        ]
    )


class ReconciliationConfig(BaseModel):
    repository_fingerprint: str = Field(default="batch", pattern="^(batch|full)$")


class EventsConfig(BaseModel):
    sink: str = Field(default="log", pattern="^(none|log|jsonl)$")
    jsonl_path: Path = Path("data/events.jsonl")


class GlobalYAMLConfig(BaseModel):
    app: AppConfig = Field(default_factory=AppConfig)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    synthesis: SynthesisConfig = Field(default_factory=SynthesisConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    files: FilesConfig = Field(default_factory=FilesConfig)
    reconciliation: ReconciliationConfig = Field(default_factory=ReconciliationConfig)
    events: EventsConfig = Field(default_factory=EventsConfig)


def load_yaml_config(path: Path = CONFIG_PATH) -> GlobalYAMLConfig:
    if not path.exists():
        return GlobalYAMLConfig()
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    return GlobalYAMLConfig(**raw)


class Secrets(BaseSettings):
    """Environment overrides; field names map to upper-case env vars."""

    database_url: str | None = None
    ollama_base_url: str | None = None
    docsync_log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


yaml_config = load_yaml_config()
secrets = Secrets()
