"""Configuration handling."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional
import yaml

from .audio_utils import SUPPORTED_EXTENSIONS
from .filename_parsers import DEFAULT_ORDER, DEFAULT_PREFIX, FilenameParserRegistry


@dataclass
class TranscriptionConfig:
    model: str = "small"
    language: Optional[str] = None
    device: Optional[str] = None
    compute_type: Optional[str] = None


@dataclass
class LoggingConfig:
    log_dir: str = "logs"
    level: str = "INFO"
    console: bool = False


@dataclass
class Config:
    base_dir: str = ""
    extensions: List[str] = field(default_factory=lambda: list(SUPPORTED_EXTENSIONS))
    filename_parsers: List[str] = field(default_factory=lambda: list(DEFAULT_ORDER))
    filename_parser_override: Optional[str] = None
    prefix: str = DEFAULT_PREFIX
    transcription: TranscriptionConfig = field(default_factory=TranscriptionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def build_registry(self, override: Optional[str] = None) -> FilenameParserRegistry:
        return FilenameParserRegistry.from_names(
            self.filename_parsers,
            override=override or self.filename_parser_override,
            prefix=self.prefix,
        )


def load_config(path: str) -> Config:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    transcription = TranscriptionConfig(**(data.get("transcription") or {}))
    logging_cfg = LoggingConfig(**(data.get("logging") or {}))
    defaults = Config()

    return Config(
        base_dir=data.get("base_dir") or "",
        extensions=[str(ext).lower() for ext in data.get("extensions") or defaults.extensions],
        filename_parsers=list(data.get("filename_parsers") or defaults.filename_parsers),
        filename_parser_override=data.get("filename_parser_override"),
        prefix=data.get("prefix", DEFAULT_PREFIX),
        transcription=transcription,
        logging=logging_cfg,
    )


def save_config(path: str, config: Config) -> None:
    data = {
        "base_dir": config.base_dir,
        "extensions": list(config.extensions),
        "filename_parsers": list(config.filename_parsers),
        "filename_parser_override": config.filename_parser_override,
        "prefix": config.prefix,
        "transcription": {
            "model": config.transcription.model,
            "language": config.transcription.language,
            "device": config.transcription.device,
            "compute_type": config.transcription.compute_type,
        },
        "logging": {
            "log_dir": config.logging.log_dir,
            "level": config.logging.level,
            "console": config.logging.console,
        },
    }
    with open(path, "w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False)
