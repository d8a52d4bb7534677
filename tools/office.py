"""LibreOffice-backed converter for office formats (docx, xlsx, pptx, odt, ...)."""
from __future__ import annotations

import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from config.settings import settings
from document.errors import CollaboratorUnavailable, InputMissing, InvalidParameter
from utils.logging import logger

_INSTALL_HINT = "install LibreOffice and make `soffice` available on PATH or set DOCENGINE_LIBREOFFICE_BINARY"

SUPPORTED_SUFFIXES = (".doc", ".docx", ".odt", ".rtf", ".xls", ".xlsx", ".ods", ".ppt", ".pptx", ".odp")


class LibreOfficeConverter:
    name = "LibreOffice"

    def __init__(self, binary: Optional[str] = None, timeout: Optional[float] = None):
        self.binary = binary or settings.libreoffice_binary
        self.timeout = timeout or settings.external_tool_timeout

    def is_available(self) -> bool:
        return shutil.which(self.binary) is not None

    def convert_to_pdf(self, data: bytes, suffix: str) -> bytes:
        """
        Convert an office document to PDF with a headless LibreOffice run.

        Args:
            data: Source file bytes
            suffix: Source file extension, e.g. ".docx"

        Raises:
            CollaboratorUnavailable: LibreOffice missing, failed, or produced no output
        """
        if not data:
            raise InputMissing("Document bytes are empty")
        suffix = suffix if suffix.startswith(".") else f".{suffix}"
        if suffix.lower() not in SUPPORTED_SUFFIXES:
            raise InvalidParameter(f"Unsupported office format {suffix!r}")
        binary = shutil.which(self.binary)
        if binary is None:
            raise CollaboratorUnavailable(self.name, _INSTALL_HINT)

        with tempfile.TemporaryDirectory(prefix="docengine-office-") as tmp:
            src = Path(tmp) / f"source{suffix.lower()}"
            src.write_bytes(data)
            cmd = [binary, "--headless", "--convert-to", "pdf", "--outdir", tmp, str(src)]
            logger.info("Converting %s document with %s", suffix, self.name)
            try:
                proc = subprocess.run(cmd, capture_output=True, timeout=self.timeout, check=False)
            except (OSError, subprocess.TimeoutExpired) as exc:
                raise CollaboratorUnavailable(self.name, f"failed to run: {exc}") from exc

            out = src.with_suffix(".pdf")
            if proc.returncode != 0 or not out.exists():
                stderr = proc.stderr.decode("utf-8", errors="replace").strip()
                raise CollaboratorUnavailable(
                    self.name, f"conversion failed (status {proc.returncode}): {stderr or 'no output'}"
                )
            return out.read_bytes()
