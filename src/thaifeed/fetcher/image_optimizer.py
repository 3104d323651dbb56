"""图片压缩与本地存储."""

import asyncio
import io
import re
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Literal

from PIL import Image

ImageFormat = Literal["webp", "jpeg", "png"]


class ImageOptimizer:
    """使用 Pillow 缩放并重新编码图片，保存到上传目录."""

    def __init__(
        self,
        upload_dir: str | Path,
        url_prefix: str = "/uploads",
        max_width: int = 1200,
        quality: int = 80,
    ) -> None:
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self.max_width = max_width
        self.quality = quality
        self._executor = ThreadPoolExecutor(max_workers=2)

    async def optimize_and_store(
        self,
        data: bytes,
        filename: str,
        *,
        format: ImageFormat = "webp",
    ) -> str:
        """
        压缩并保存图片.

        Pillow 是同步库，这里用线程池包装成异步。

        Returns:
            可直接用作 image_url 的本地路径，例如 /uploads/1700000000-foo.webp
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor,
            self._optimize_sync,
            data,
            filename,
            format,
        )

    def _optimize_sync(self, data: bytes, filename: str, format: ImageFormat) -> str:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

        stem = self._safe_stem(filename)
        output_name = f"{int(time.time() * 1000)}-{stem}.{format}"
        output_path = self.upload_dir / output_name

        with Image.open(io.BytesIO(data)) as img:
            # 只缩小不放大
            if img.width > self.max_width:
                height = round(img.height * self.max_width / img.width)
                img = img.resize((self.max_width, height))

            if format == "jpeg" and img.mode not in ("RGB", "L"):
                img = img.convert("RGB")

            save_format = "JPEG" if format == "jpeg" else format.upper()
            img.save(output_path, format=save_format, quality=self.quality)

        return f"{self.url_prefix}/{output_name}"

    def _safe_stem(self, filename: str) -> str:
        """去掉扩展名和不安全字符."""
        stem = Path(filename).stem or "image"
        stem = re.sub(r"[^A-Za-z0-9_-]+", "-", stem).strip("-")
        return stem[:60] or "image"

    def close(self) -> None:
        self._executor.shutdown(wait=False)
