"""
Pipeline configuration - toggles and kernel sizes for single-shot recognition
"""
import os
from dataclasses import dataclass


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "y", "on"}:
        return True
    if value in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class PipelineConfig:
    """Configuration for RecognizeTask and its stages"""
    # Preprocessing
    adaptive_threshold: bool = False  # binarize after blackhat (off to match capture behaviour)
    blur_kernel: tuple[int, int] = (3, 3)
    blackhat_kernel: tuple[int, int] = (13, 5)  # (width, height)
    threshold_block_size: int = 7
    threshold_c: int = 2

    # Text cleanup
    uppercase: bool = True
    strip_whitespace: bool = False  # trim and drop all whitespace

    # Engine
    language: str = "eng"
    page_seg_mode: int = 6

    @staticmethod
    def from_env() -> "PipelineConfig":
        """Build a config from OCR_* environment variables, falling back to defaults."""
        defaults = PipelineConfig()
        return PipelineConfig(
            adaptive_threshold=_get_bool("OCR_ADAPTIVE_THRESHOLD", defaults.adaptive_threshold),
            strip_whitespace=_get_bool("OCR_STRIP_WHITESPACE", defaults.strip_whitespace),
            uppercase=_get_bool("OCR_UPPERCASE", defaults.uppercase),
            language=(os.getenv("OCR_LANGUAGE") or defaults.language).strip() or defaults.language,
            page_seg_mode=_get_int("OCR_PSM", defaults.page_seg_mode),
        )
