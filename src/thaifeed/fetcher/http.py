"""带重试的 HTTP 抓取."""

import asyncio
import errno
import logging
import re
import socket

import httpx

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 3
DEFAULT_BASE_TIMEOUT = 20.0
DEFAULT_TIMEOUT_STEP = 15.0
DEFAULT_BACKOFF_BASE = 0.5


class FetchError(Exception):
    """抓取错误."""


class ServerError(FetchError):
    """远端返回 5xx，可重试."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"HTTP {status_code} from {url}")
        self.url = url
        self.status_code = status_code


# 连接被重置、DNS 暂时解析失败
TRANSIENT_ERRNOS = frozenset({errno.ECONNRESET, socket.EAI_NONAME, socket.EAI_AGAIN})

_ERRNO_IN_MESSAGE = re.compile(r"\[Errno (-?\d+)\]")


def _cause_chain(exc: BaseException) -> list[BaseException]:
    chain: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and current not in chain:
        chain.append(current)
        current = current.__cause__ or current.__context__
    return chain


def _errno(exc: BaseException) -> int | None:
    """从异常链或消息里取系统错误码."""
    for item in _cause_chain(exc):
        code = getattr(item, "errno", None)
        if isinstance(code, int):
            return code
    match = _ERRNO_IN_MESSAGE.search(str(exc))
    return int(match.group(1)) if match else None


def is_transient_error(exc: BaseException) -> bool:
    """
    判断异常是否属于可重试的瞬时故障.

    超时和 5xx 一律重试；连接/读取错误只在连接被重置或 DNS 解析失败时重试，
    连接被拒绝、证书错误等立即失败。
    """
    if isinstance(exc, httpx.TimeoutException | ServerError):
        return True
    if not isinstance(exc, httpx.ConnectError | httpx.ReadError):
        return False
    if any(isinstance(item, socket.gaierror) for item in _cause_chain(exc)):
        return True
    return _errno(exc) in TRANSIENT_ERRNOS


def attempt_timeout(attempt: int, base_timeout: float, step: float) -> float:
    """第 attempt 次尝试（从 1 开始）的超时秒数."""
    return base_timeout + (attempt - 1) * step


def backoff_delay(attempt: int, backoff_base: float) -> float:
    """第 attempt 次失败后的等待秒数."""
    return backoff_base * 2 ** (attempt - 1)


def _error_code(exc: BaseException) -> str:
    """提取错误码，便于日志排查."""
    if isinstance(exc, ServerError):
        return str(exc.status_code)
    code = _errno(exc)
    return str(code) if code is not None else type(exc).__name__


async def fetch_with_retry(
    client: httpx.AsyncClient,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    attempts: int = DEFAULT_ATTEMPTS,
    base_timeout: float = DEFAULT_BASE_TIMEOUT,
    timeout_step: float = DEFAULT_TIMEOUT_STEP,
    backoff_base: float = DEFAULT_BACKOFF_BASE,
    method: str = "GET",
) -> httpx.Response:
    """
    发起请求，瞬时故障时按指数退避重试.

    Args:
        client: 共享的 httpx 客户端
        url: 目标地址
        headers: 额外请求头
        attempts: 最多尝试次数
        base_timeout: 第一次尝试的超时秒数，之后每次增加 timeout_step
        timeout_step: 每次重试增加的超时秒数
        backoff_base: 退避基数，第 n 次失败后等待 backoff_base * 2^(n-1) 秒
        method: HTTP 方法

    Returns:
        状态码 < 500 的响应（4xx 由调用方处理）

    Raises:
        最后一次观察到的异常
    """
    last_error: BaseException | None = None

    for attempt in range(1, attempts + 1):
        timeout = attempt_timeout(attempt, base_timeout, timeout_step)
        try:
            response = await client.request(
                method,
                url,
                headers=headers,
                timeout=httpx.Timeout(timeout),
                follow_redirects=True,
            )
            if response.status_code >= 500:
                raise ServerError(url, response.status_code)
            return response
        except Exception as e:
            last_error = e
            logger.warning(
                f"请求失败 ({attempt}/{attempts}) {url}: "
                f"{type(e).__name__} [{_error_code(e)}] {e}"
            )
            if not is_transient_error(e) or attempt >= attempts:
                raise

        await asyncio.sleep(backoff_delay(attempt, backoff_base))

    # attempts < 1 时不会发出请求
    msg = f"未发起请求: attempts={attempts}"
    raise FetchError(msg) from last_error
