"""
Conversion entry points.

The conversion core exposes exactly two synchronous operations:

- `convert_to_edit_operations`: Markdown -> Google Docs edit operations
- `convert_to_docx_bytes`: Markdown -> DOCX package bytes

Both parse into a fresh ADT, lower it and discard it. The async helpers below
run conversions in worker threads under a timeout for the HTTP layer.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from core.config import get_config
from core.errors import ConversionTimeoutError
from core.utils import validate_start_index
from docxgen.lowering import lower as lower_to_docx
from gdocs.lowering import DEFAULT_START_INDEX
from gdocs.lowering import lower as lower_to_operations
from gdocs.operations import EditOperation
from mdparse.parser import parse

logger = logging.getLogger(__name__)

T = TypeVar("T")


def convert_to_edit_operations(markdown: str, start_index: int = DEFAULT_START_INDEX) -> list[EditOperation]:
    """
    Convert Markdown into Google Docs edit operations.

    Args:
        markdown: Markdown source text.
        start_index: Document index where insertion starts (1 for an empty doc).

    Returns:
        Ordered edit operations; empty for empty or whitespace-only input.
    """
    start_index = validate_start_index(start_index)
    document = parse(markdown)
    operations = lower_to_operations(document, start_index)
    logger.info(f"Converted {len(markdown or '')} chars of Markdown into {len(operations)} edit operations")
    return operations


def convert_to_docx_bytes(markdown: str) -> bytes:
    """
    Convert Markdown into a DOCX package.

    Raises:
        PackagingError: If the package cannot be written.
    """
    document = parse(markdown)
    data = lower_to_docx(document)
    logger.info(f"Converted {len(markdown or '')} chars of Markdown into a {len(data)} byte DOCX")
    return data


async def run_conversion(func: Callable[..., T], *args: Any, timeout: float | None = None) -> T:
    """
    Run a conversion in a worker thread, bounded by a timeout.

    Raises:
        ConversionTimeoutError: If the conversion takes longer than ``timeout``
            (defaults to the configured conversion timeout).
    """
    timeout = timeout if timeout is not None else get_config().conversion_timeout
    try:
        return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error(f"Conversion {getattr(func, '__name__', func)} timed out after {timeout}s")
        raise ConversionTimeoutError(timeout) from e


async def convert_many(
    markdown_texts: list[str],
    start_index: int = DEFAULT_START_INDEX,
    timeout: float | None = None,
) -> list[list[EditOperation] | Exception]:
    """
    Convert several Markdown payloads concurrently.

    Each payload is parsed and lowered independently. A failing payload yields
    its exception in the result list instead of failing the whole batch.
    """
    logger.info(f"Converting {len(markdown_texts)} payload(s) concurrently")
    return await asyncio.gather(
        *(run_conversion(convert_to_edit_operations, text, start_index, timeout=timeout) for text in markdown_texts),
        return_exceptions=True,
    )
