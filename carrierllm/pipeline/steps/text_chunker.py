"""
Fixed-window text chunking for underwriting guides.
"""

from typing import List

DEFAULT_CHUNK_SIZE = 512
DEFAULT_CHUNK_OVERLAP = 50


def chunk_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> List[str]:
    """
    Split text into overlapping fixed-size windows.

    Windows start every (chunk_size - overlap) characters and stop once the
    next start would fall at or past the end of the text, so consecutive
    chunks share exactly `overlap` characters and the last one may be shorter.

    Args:
        text: Extracted document text
        chunk_size: Window length in characters
        overlap: Characters shared with the previous window

    Returns:
        List of chunks ([] for empty text)
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if not 0 <= overlap < chunk_size:
        raise ValueError("overlap must be in [0, chunk_size)")

    stride = chunk_size - overlap
    return [text[start: start + chunk_size] for start in range(0, len(text), stride)]
