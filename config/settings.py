"""Configuration management for limits, OCR defaults, overlay defaults, and external tools."""
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Boundary limits
    max_upload_bytes: int = Field(
        default=100 * 1024 * 1024,
        description="Upload ceiling in bytes, enforced before any engine work",
    )
    validation_max_file_size: int = Field(
        default=50 * 1024 * 1024,
        description="File size above which validation reports an issue",
    )
    page_size_tolerance: float = Field(
        default=1.0,
        description="Maximum difference in points for two page sizes to count as equal",
    )

    # Content analysis
    blank_page_min_chars: int = Field(
        default=10,
        description="Pages whose trimmed text is shorter than this are classified blank",
    )

    # Diff
    diff_report_cap: int = Field(
        default=100,
        description="Maximum number of entries in each only-in-one-document word list",
    )

    # OCR Settings
    ocr_dpi: int = Field(default=300, description="Rasterization DPI for OCR input")
    ocr_default_language: str = Field(
        default="eng",
        description="Tesseract language code used when none is requested",
    )
    ocr_candidate_languages: List[str] = Field(
        default=["eng", "spa", "fra", "deu"],
        description="Auto-detect candidates, tried in order; earlier entries win ties",
    )
    ocr_supported_languages: List[str] = Field(
        default=["eng", "spa", "fra", "deu", "ita", "por", "rus", "chi_sim", "jpn", "kor"],
        description="Language codes accepted by the OCR pipeline",
    )
    ocr_max_workers: int = Field(default=4, description="Parallel page workers per OCR pass")
    ocr_page_timeout: float = Field(
        default=120.0,
        description="Seconds allowed for a single page's rasterization and recognition",
    )
    tesseract_cmd: Optional[str] = Field(
        default=None,
        description="Explicit path to the tesseract binary (None = use PATH)",
    )

    # Overlay defaults
    watermark_font_size: float = Field(default=50.0, description="Default watermark font size")
    watermark_opacity: float = Field(default=0.3, description="Default watermark opacity (0.0-1.0)")
    watermark_rotation: float = Field(default=45.0, description="Default watermark rotation in degrees")
    watermark_color: str = Field(default="128,128,128", description="Default watermark colour as 'r,g,b'")
    page_number_font_size: float = Field(default=12.0, description="Default page number font size")
    page_number_margin: float = Field(
        default=30.0,
        description="Distance in points from the top/bottom edge for page numbers",
    )
    side_margin: float = Field(
        default=50.0,
        description="Distance in points from the left/right edge for aligned labels",
    )

    # External tools
    qpdf_binary: str = Field(default="qpdf", description="qpdf executable used for encryption")
    libreoffice_binary: str = Field(
        default="soffice",
        description="LibreOffice executable used for office-format conversion",
    )
    external_tool_timeout: float = Field(
        default=60.0,
        description="Seconds allowed for an external tool invocation",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level for the CLI")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "DOCENGINE_"


def get_settings() -> Settings:
    """Return a cached settings instance."""
    return _get_settings()


@lru_cache()
def _get_settings() -> Settings:
    return Settings()


settings = get_settings()
