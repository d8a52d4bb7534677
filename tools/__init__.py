"""Wrappers around external command-line tools the engine delegates to."""
from tools.encryption import QpdfEncryptionTool
from tools.office import LibreOfficeConverter

__all__ = ["QpdfEncryptionTool", "LibreOfficeConverter"]
