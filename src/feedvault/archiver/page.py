"""默认归档器 - 下载页面并保存可生成的归档产物."""

import asyncio
import logging
import mimetypes
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from trafilatura import extract

from feedvault.core.store import ArchiveTarget, Store
from feedvault.fetcher.http import FeedFetcher, FetchError
from feedvault.models.link import UNAVAILABLE
from feedvault.utils.html_parser import html_to_text

logger = logging.getLogger(__name__)


class CaptureError(Exception):
    """归档失败，链接的产物槽位保持为空."""


class PageArchiver:
    """
    按响应类型生成归档产物.

    - PDF 响应保存为 pdf
    - 图片响应保存为 image
    - HTML 页面保存可读文本 (readable) 与原始整页 (monolith)

    不支持的产物标记为 unavailable，链接随之离开待归档队列。
    """

    def __init__(self, fetcher: FeedFetcher, store: Store, storage_folder: str) -> None:
        self.fetcher = fetcher
        self.store = store
        self.storage_folder = Path(storage_folder)
        self._executor = ThreadPoolExecutor(max_workers=4)

    def close(self) -> None:
        """释放正文提取线程池."""
        self._executor.shutdown(wait=False)

    async def archive(self, target: ArchiveTarget) -> None:
        """下载并保存归档产物."""
        try:
            response = await self.fetcher.get(target.url)
        except FetchError as e:
            msg = f"下载页面失败: {e}"
            raise CaptureError(msg) from e

        content_type = response.headers.get("content-type", "")
        mime = content_type.split(";")[0].strip().lower()

        if mime == "application/pdf":
            artifacts = {"pdf": await self._save(target, "pdf", response.content)}
        elif mime.startswith("image/"):
            suffix = (mimetypes.guess_extension(mime) or ".img").lstrip(".")
            artifacts = {"image": await self._save(target, suffix, response.content)}
        else:
            artifacts = await self._archive_html(target, response.text)

        for name in ("image", "pdf", "readable", "monolith"):
            artifacts.setdefault(name, UNAVAILABLE)

        await self.store.update_artifacts(target.link_id, artifacts)

    async def _archive_html(self, target: ArchiveTarget, html: str) -> dict[str, str]:
        if not html.strip():
            msg = "页面内容为空"
            raise CaptureError(msg)

        artifacts = {"monolith": await self._save(target, "html", html.encode())}

        loop = asyncio.get_running_loop()
        text = await loop.run_in_executor(self._executor, extract_readable, html)
        if text:
            artifacts["readable"] = await self._save(
                target, "readability.txt", text.encode()
            )
        else:
            logger.info(f"未能提取正文: {target.url}")

        return artifacts

    async def _save(self, target: ArchiveTarget, suffix: str, data: bytes) -> str:
        """写入 archives/<集合>/<链接>.<后缀>，返回相对存储目录的路径."""
        filename = f"{target.link_id}.{suffix}"
        relative = Path("archives") / str(target.collection_id) / filename
        path = self.storage_folder / relative
        await asyncio.to_thread(_write_file, path, data)
        return relative.as_posix()


def extract_readable(html: str) -> str | None:
    """提取正文纯文本，trafilatura 无结果时退回整页文本."""
    text = extract(
        html,
        include_comments=False,
        include_tables=True,
        output_format="txt",
        favor_precision=False,
    )
    if not text:
        text = html_to_text(html)
    return _clean_text(text) or None


def _clean_text(text: str) -> str:
    """清理纯文本内容."""
    text = re.sub(r"\n{3,}", "\n\n", text)
    lines = [line.strip() for line in text.split("\n")]
    text = "\n".join(lines)
    # 移除控制字符
    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f]", "", text)
    return text.strip()


def _write_file(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
