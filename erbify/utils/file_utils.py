"""
File utilities for conversion operations
"""
import os
import asyncio
import uuid
import aiofiles
import aiofiles.os
from pathlib import Path
from typing import Union

from erbify.config import TARGET_FORMAT


def derive_output_path(input_path: Union[str, Path], source_format: str,
                       target_format: str = TARGET_FORMAT) -> Path:
    """
    Compute where the converted template is written.

    The ``.{source_format}`` suffix is stripped from the file name. If what is
    left still has a dot (a compound name such as ``index.html``) only
    ``.erb`` is appended, otherwise ``.html.erb``.

    Args:
        input_path: Path of the source template
        source_format: Dialect tag whose extension is stripped
        target_format: Extension of the converted file

    Returns:
        Path: Sibling path of the converted file

    Examples:
        index.html.haml -> index.html.erb
        header.haml -> header.html.erb
        notes.txt -> notes.txt.erb
    """
    path = Path(input_path)
    name = path.name
    extension = f".{source_format.lstrip('.')}"

    # A file named exactly like the extension keeps its name
    if name.endswith(extension) and name != extension:
        name = name[:-len(extension)]

    new_extension = f".{target_format}" if "." in name else f".html.{target_format}"
    return path.with_name(f"{name}{new_extension}")


async def read_text(path: Union[str, Path]) -> str:
    """Read a file as UTF-8 text."""
    async with aiofiles.open(path, 'r', encoding='utf-8') as f:
        return await f.read()


async def write_text_atomic(path: Union[str, Path], content: str) -> Path:
    """
    Write UTF-8 text so that ``path`` is either absent or complete.

    Content goes to a hidden temporary sibling, is flushed and fsynced, then
    renamed over ``path``. The temporary file is removed if any step fails.

    Args:
        path: Final location of the file
        content: Text to write

    Returns:
        Path: The written path
    """
    path = Path(path)
    tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex[:8]}.tmp")
    try:
        async with aiofiles.open(tmp_path, 'w', encoding='utf-8') as f:
            await f.write(content)
            await f.flush()
            await asyncio.to_thread(os.fsync, f.fileno())
        await aiofiles.os.replace(tmp_path, path)
    except BaseException:
        if await aiofiles.os.path.exists(tmp_path):
            await aiofiles.os.remove(tmp_path)
        raise
    return path


async def remove_file(path: Union[str, Path]) -> None:
    """Delete a file."""
    await aiofiles.os.remove(path)
