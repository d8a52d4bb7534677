"""qpdf-backed encryption collaborator.

The engine itself never encrypts; it hands serialized bytes to qpdf through
temporary files and returns whatever qpdf writes.
"""
from __future__ import annotations

import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional

from config.settings import settings
from document.errors import CollaboratorUnavailable, EncryptedDocument, InputMissing
from utils.logging import logger

_INSTALL_HINT = "install qpdf (apt install qpdf / brew install qpdf) or set DOCENGINE_QPDF_BINARY"

# qpdf exits with 3 when it succeeded with warnings
_OK_CODES = (0, 3)


class QpdfEncryptionTool:
    """Encrypts and decrypts PDF bytes with the ``qpdf`` binary."""

    name = "qpdf"

    def __init__(self, binary: Optional[str] = None, timeout: Optional[float] = None):
        self.binary = binary or settings.qpdf_binary
        self.timeout = timeout or settings.external_tool_timeout

    def is_available(self) -> bool:
        return shutil.which(self.binary) is not None

    def _resolve(self) -> str:
        path = shutil.which(self.binary)
        if path is None:
            raise CollaboratorUnavailable(self.name, _INSTALL_HINT)
        return path

    def encrypt(
        self,
        data: bytes,
        user_password: str,
        owner_password: str,
        restrict_permissions: bool = False,
    ) -> bytes:
        """
        Apply AES-256 encryption.

        An empty ``user_password`` yields a file that opens without a password but
        carries the owner password; with ``restrict_permissions`` printing,
        modification and extraction are disallowed for non-owners.
        """
        args = ["--encrypt", user_password, owner_password, "256"]
        if restrict_permissions:
            args += ["--print=none", "--modify=none", "--extract=n"]
        args.append("--")
        return self._run(data, args)

    def decrypt(self, data: bytes, password: str) -> bytes:
        return self._run(data, [f"--password={password}", "--decrypt"])

    def _run(self, data: bytes, args: List[str]) -> bytes:
        if not data:
            raise InputMissing("Document bytes are empty")
        binary = self._resolve()
        with tempfile.TemporaryDirectory(prefix="docengine-qpdf-") as tmp:
            src = Path(tmp) / "in.pdf"
            dst = Path(tmp) / "out.pdf"
            src.write_bytes(data)
            cmd = [binary, *args, str(src), str(dst)]
            logger.debug("Running %s %s", self.name, args[0])
            try:
                proc = subprocess.run(cmd, capture_output=True, timeout=self.timeout, check=False)
            except (OSError, subprocess.TimeoutExpired) as exc:
                raise CollaboratorUnavailable(self.name, f"failed to run: {exc}") from exc

            stderr = proc.stderr.decode("utf-8", errors="replace").strip()
            if proc.returncode not in _OK_CODES:
                if "invalid password" in stderr.lower():
                    raise EncryptedDocument("Incorrect password for encrypted document")
                raise CollaboratorUnavailable(
                    self.name, f"exited with status {proc.returncode}: {stderr or 'no output'}"
                )
            if proc.returncode == 3:
                logger.warning("%s reported warnings: %s", self.name, stderr)
            return dst.read_bytes()
