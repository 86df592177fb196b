"""封面图片解码与基础预处理实现。"""

from __future__ import annotations

import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from comic_covers.core.exceptions import ImageLoadingError

LOGGER = logging.getLogger(__name__)


def load_image_bytes(data: bytes) -> Image.Image:
    """从内存解码图片并执行 EXIF 旋转与模式归一化。

    返回值为新的 Image 对象，调用者负责关闭。
    """

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()

            # EXIF Orientation 校正
            img = ImageOps.exif_transpose(img)

            if img.mode != "RGB":
                img = _convert_to_rgb(img)

            return img.copy()
    except (UnidentifiedImageError, OSError) as exc:
        LOGGER.debug("无法识别封面图片 (%d bytes): %s", len(data), exc)
        raise ImageLoadingError(f"无法解码封面图片: {exc}") from exc


def _convert_to_rgb(img: Image.Image) -> Image.Image:
    """将任意模式图像转换为 RGB。"""

    if img.mode == "P":
        img = img.convert("RGBA")

    if img.mode in {"RGBA", "LA"}:
        # JPEG 不支持透明通道，用白色背景混合。
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img.convert("RGBA"), mask=img.split()[-1])
        return background

    return img.convert("RGB")
