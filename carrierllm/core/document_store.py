"""
Source document storage and plain-text extraction for carrier underwriting guides.
"""

import io
import logging
import mimetypes
from pathlib import Path
from typing import List, Optional

from PyPDF2 import PdfReader

from carrierllm.config import get_settings
from carrierllm.pipeline.models import SourceDocument


logger = logging.getLogger(__name__)


class DocumentStoreError(RuntimeError):
    """Raised when the document store cannot be listed or read."""


class TextExtractionError(RuntimeError):
    """Raised when a document's text cannot be extracted."""


class LocalDocumentStore:
    """
    Document store backed by a local directory.

    Keys are POSIX paths relative to the root directory, e.g.
    "acme-underwriting-guide.pdf" or "2024/sentinel_guide.pdf".
    """

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root is not None else get_settings().resolved_documents_dir

    def list(self) -> List[SourceDocument]:
        """List every file under the root, sorted by key."""
        if not self.root.is_dir():
            raise DocumentStoreError(f"Document directory not found: {self.root}")

        documents = []
        for path in sorted(p for p in self.root.rglob("*") if p.is_file()):
            key = path.relative_to(self.root).as_posix()
            content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
            documents.append(SourceDocument(
                key=key,
                size=path.stat().st_size,
                content_type=content_type,
            ))
        return documents

    def get(self, key: str) -> Optional[bytes]:
        """Return the document bytes, or None if the key does not exist."""
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise DocumentStoreError(f"Key escapes the document directory: {key}")
        if not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise DocumentStoreError(f"Could not read {key}: {e}") from e

    def put(self, key: str, data: bytes) -> SourceDocument:
        """Store a document under `key`, replacing any existing file."""
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise DocumentStoreError(f"Key escapes the document directory: {key}")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return SourceDocument(
            key=key,
            size=len(data),
            content_type=mimetypes.guess_type(path.name)[0] or "application/octet-stream",
        )


class PdfTextExtractor:
    """Extract plain text from PDF bytes with PyPDF2."""

    def extract(self, data: bytes) -> str:
        """
        Return the concatenated page text (may be empty for scanned PDFs).

        Raises:
            TextExtractionError: if the PDF cannot be opened or parsed
        """
        try:
            reader = PdfReader(io.BytesIO(data))
            texts = []
            for page in reader.pages:
                text = (page.extract_text() or "").replace("\u200b", "").strip()
                if text:
                    texts.append(text)
        except Exception as e:
            raise TextExtractionError(f"{type(e).__name__}: {e}") from e

        return "\n".join(texts)
