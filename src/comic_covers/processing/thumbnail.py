"""缩略图生成：等比缩放到限定框内并编码为 JPEG。"""

from __future__ import annotations

import io
from typing import Optional, Tuple

from PIL import Image

from comic_covers.processing.image_loader import load_image_bytes

_RESAMPLING = getattr(Image, "Resampling", Image)

JPEG_QUALITY = 80


def transform(data: bytes, box: Optional[Tuple[int, int]] = None) -> bytes:
    """将图片字节转换为 JPEG 字节。

    给定 ``box`` 时保持宽高比缩放到框内，且从不放大；
    ``box`` 为 ``None`` 时按原始分辨率重新编码。
    """

    image = load_image_bytes(data)
    try:
        if box is not None:
            # thumbnail 只缩小不放大
            image.thumbnail(box, _RESAMPLING.LANCZOS)

        output = io.BytesIO()
        image.save(output, format="JPEG", quality=JPEG_QUALITY)
        return output.getvalue()
    finally:
        image.close()
