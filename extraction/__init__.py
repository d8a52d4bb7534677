"""Extraction collaborators (text, raster, recognition) and the OCR pipeline."""
from extraction.ocr_pipeline import OCRConfig, OCRPipeline
from extraction.rasterizer import PyMuPDFRasterizer
from extraction.text_extractor import PyMuPDFTextExtractor

__all__ = [
    "OCRConfig",
    "OCRPipeline",
    "PyMuPDFRasterizer",
    "PyMuPDFTextExtractor",
]
