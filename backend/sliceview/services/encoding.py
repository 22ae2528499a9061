from __future__ import annotations

import asyncio
import logging
from io import BytesIO
from typing import Any, Callable, Sequence

from PIL import Image

from sliceview.core.errors import EncodingFailedError


LOGGER = logging.getLogger(__name__)

PNG_MEDIA_TYPE = "image/png"
PNG_EXTENSION = "png"


def encode_png(img: Image.Image, *, compress_level: int = 6) -> bytes:
    bio = BytesIO()
    img.save(bio, format="PNG", compress_level=int(compress_level))
    return bio.getvalue()


async def encode_all(
    items: Sequence[Any],
    *,
    render: Callable[[Any], Image.Image] | None = None,
    compress_level: int = 6,
    concurrency: int = 4,
    encoder: Callable[..., bytes] = encode_png,
) -> list[bytes]:
    """
    Encode every strip in a worker thread and join on all of them.
    With `render`, each item is turned into its strip inside the same worker
    call, so cropping and encoding both stay off the event loop.

    Payloads come back in input order. The batch is atomic: the first failure
    cancels whatever has not started yet and raises EncodingFailedError, so a
    caller never sees a partial list.
    """
    if not items:
        return []

    sem = asyncio.Semaphore(max(1, int(concurrency)))

    def _render_and_encode(item: Any) -> bytes:
        img = render(item) if render is not None else item
        return encoder(img, compress_level=compress_level)

    async def _encode_one(position: int, item: Any) -> bytes:
        async with sem:
            try:
                data = await asyncio.to_thread(_render_and_encode, item)
            except (OSError, ValueError, MemoryError) as e:
                raise EncodingFailedError(position + 1, str(e) or e.__class__.__name__) from e
        LOGGER.debug("Encoded segment %d (%d bytes)", position + 1, len(data))
        return data

    tasks = [asyncio.create_task(_encode_one(i, item)) for i, item in enumerate(items)]
    try:
        return list(await asyncio.gather(*tasks))
    except Exception:
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
