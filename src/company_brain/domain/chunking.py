"""Paragraph chunking for long free text.

Paragraphs are separated by a blank line. Consecutive paragraphs are packed
into one chunk while the chunk stays within ``max_chunk_size`` characters; a
single paragraph longer than the bound becomes a chunk of its own and is never
split. Joining the returned chunks with ``PARAGRAPH_SEPARATOR`` gives back the
input unchanged.
"""

from company_brain.core.constants import CHUNK_MAX_SIZE_DEFAULT, PARAGRAPH_SEPARATOR


def chunk_text(text: str, max_chunk_size: int = CHUNK_MAX_SIZE_DEFAULT) -> list[str]:
    """Split ``text`` into paragraph-aligned chunks of at most ``max_chunk_size`` characters.

    Args:
        text: Free text, paragraphs separated by a blank line
        max_chunk_size: Soft bound; only an oversized single paragraph exceeds it

    Returns:
        The chunks in input order; empty for blank input
    """
    if max_chunk_size <= 0:
        raise ValueError("max_chunk_size must be positive")
    if not text or not text.strip():
        return []

    chunks: list[str] = []
    buffer: list[str] = []
    buffer_len = 0

    for paragraph in text.split(PARAGRAPH_SEPARATOR):
        added = len(paragraph) + (len(PARAGRAPH_SEPARATOR) if buffer else 0)
        if buffer and buffer_len + added > max_chunk_size:
            chunks.append(PARAGRAPH_SEPARATOR.join(buffer))
            buffer = []
            buffer_len = 0
            added = len(paragraph)
        buffer.append(paragraph)
        buffer_len += added

    if buffer:
        chunks.append(PARAGRAPH_SEPARATOR.join(buffer))

    return chunks
