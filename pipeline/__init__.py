"""Pipeline module - bytes-in, bytes-out entry point to the document engine."""
from pipeline.engine import DocumentEngine, EngineConfig

__all__ = ["DocumentEngine", "EngineConfig"]
