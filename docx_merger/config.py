"""Runtime configuration loaded from ``DOCX_MERGER_*`` environment variables."""
from __future__ import annotations

import threading
from typing import Literal

from pydantic_settings import BaseSettings

_lock = threading.Lock()
_instance: MergerConfig | None = None


class MergerConfig(BaseSettings):
    model_config = {"env_prefix": "DOCX_MERGER_"}

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    page_description_policy: Literal["placeholder", "reject"] = "placeholder"
    default_merge_mode: Literal["smartMerge", "simpleMerge", "styleOnly"] = "smartMerge"
    smart_merge_filename: str = "merged_smart.docx"
    simple_merge_filename: str = "merged_simple.docx"
    styled_suffix: str = "_styled"
    separator_color: str = "666666"


def get_config() -> MergerConfig:
    global _instance
    if _instance is None:
        with _lock:
            if _instance is None:
                _instance = MergerConfig()
    return _instance


def reset_config() -> None:
    global _instance
    with _lock:
        _instance = None
