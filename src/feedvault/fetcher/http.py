"""订阅源 HTTP 抓取."""

import asyncio

import httpx

from feedvault.config import Settings

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class FetchError(Exception):
    """抓取失败（网络、超时、证书或 HTTP 状态）."""

    def __init__(self, message: str, *, url: str, connectivity: bool = True) -> None:
        super().__init__(message)
        self.url = url
        # 连接类错误（DNS、拒绝连接、TLS、超时）才算“订阅源不可达”
        self.connectivity = connectivity


class FeedFetcher:
    """带超时和证书校验开关的异步抓取客户端."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = settings.fetch_timeout_seconds
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            verify=not settings.ignore_unauthorized_ca,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=transport,
        )

    async def close(self) -> None:
        """关闭客户端."""
        await self._client.aclose()

    async def get(self, url: str) -> httpx.Response:
        """
        GET 指定 URL，整个请求不超过 timeout 秒.

        Raises:
            FetchError: 请求失败或返回非 2xx 状态
        """
        try:
            async with asyncio.timeout(self.timeout):
                response = await self._client.get(url)
            response.raise_for_status()
        except TimeoutError as e:
            msg = f"请求超时 ({self.timeout}s)"
            raise FetchError(msg, url=url) from e
        except httpx.HTTPStatusError as e:
            msg = f"HTTP {e.response.status_code}"
            raise FetchError(msg, url=url, connectivity=False) from e
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            msg = f"无效的 URL: {e}"
            raise FetchError(msg, url=url, connectivity=False) from e
        except httpx.TooManyRedirects as e:
            msg = f"重定向次数过多: {e}"
            raise FetchError(msg, url=url, connectivity=False) from e
        except httpx.DecodingError as e:
            msg = f"响应解码失败: {e}"
            raise FetchError(msg, url=url, connectivity=False) from e
        except httpx.TransportError as e:
            raise FetchError(str(e) or type(e).__name__, url=url) from e
        except httpx.RequestError as e:
            msg = str(e) or type(e).__name__
            raise FetchError(msg, url=url, connectivity=False) from e

        return response

    async def fetch(self, url: str) -> bytes:
        """抓取原始响应体."""
        response = await self.get(url)
        return response.content
