"""SolverClient -- stage 共享的 HTTP 抓取封装

基于 httpx.AsyncClient，统一处理浏览器身份、超时与错误映射：
httpx 异常在此转换为 StageFetchError，不会泄漏到 solver 之外。
"""

from urllib.parse import quote, urlsplit

import httpx
import structlog

from .config import SolverConfig
from .exceptions import StageFetchError
from .profiles import DELEGATE_USER_AGENT, ClientProfile, headers_for

log = structlog.get_logger()

# 健康检查超时（硬编码，应快速响应）
HEALTH_CHECK_TIMEOUT_S = 5

# 与 JS encodeURIComponent 保持一致的保留字符
_URI_COMPONENT_SAFE = "!~*'()"


def encode_link(url: str) -> str:
    """对单个链接做 URI component 编码"""
    return quote(url, safe=_URI_COMPONENT_SAFE)


class SolverClient:
    """Stage solver 使用的 HTTP 客户端

    每次调用各自发起请求，不保存跨调用状态。
    """

    def __init__(
        self,
        config: SolverConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            config: Solver 配置，None 使用默认值
            http_client: 外部注入的 httpx 客户端（测试时注入 MockTransport）
        """
        self.config = config or SolverConfig()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(follow_redirects=True)

    async def fetch_html(
        self,
        url: str,
        profile: ClientProfile = ClientProfile.DESKTOP,
        stage: str = "",
        extra_headers: dict[str, str] | None = None,
    ) -> str:
        """抓取 HTML 页面

        Raises:
            StageFetchError: 网络错误、超时或非 200 响应
        """
        timeout = self.config.html_timeout_s
        headers = headers_for(profile, **(extra_headers or {}))
        try:
            resp = await self._http.get(url, headers=headers, timeout=timeout)
        except httpx.TimeoutException as e:
            raise StageFetchError(url, f"Timed out after {timeout:g}s", stage=stage) from e
        except httpx.HTTPError as e:
            raise StageFetchError(url, str(e) or type(e).__name__, stage=stage) from e

        if resp.status_code != 200:
            raise StageFetchError(
                url,
                f"Cannot open page. Status: {resp.status_code}",
                stage=stage,
            )
        return resp.text

    async def call_delegate(self, api_url: str, target_url: str, stage: str = "") -> dict:
        """调用外部解析服务：GET <api_url><encoded target>

        Returns:
            服务返回的 JSON 对象（status 字段由调用方判断）

        Raises:
            StageFetchError: 网络错误、超时或无法解析的响应体
        """
        full_url = api_url + encode_link(target_url)
        timeout = self.config.delegate_timeout_s
        try:
            resp = await self._http.get(
                full_url,
                headers={"User-Agent": DELEGATE_USER_AGENT},
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            raise StageFetchError(full_url, f"API timed out after {timeout:g}s", stage=stage) from e
        except httpx.HTTPError as e:
            raise StageFetchError(full_url, f"API error: {str(e) or type(e).__name__}", stage=stage) from e

        try:
            data = resp.json()
        except ValueError as e:
            raise StageFetchError(
                full_url,
                f"API returned non-JSON response (status {resp.status_code})",
                stage=stage,
            ) from e
        if not isinstance(data, dict):
            raise StageFetchError(full_url, "API returned unexpected JSON shape", stage=stage)

        log.debug(
            "delegate_call_completed",
            stage=stage,
            status_code=resp.status_code,
            delegate_status=data.get("status"),
        )
        return data

    async def health_check(self, api_url: str) -> bool:
        """检查外部服务可达性（任何非 5xx 响应视为可达）

        注意: 此方法不抛出异常，所有异常内部捕获并返回 False。
        """
        parts = urlsplit(api_url)
        url = f"{parts.scheme}://{parts.netloc}/"
        try:
            resp = await self._http.get(url, timeout=HEALTH_CHECK_TIMEOUT_S)
            return resp.status_code < 500
        except Exception as e:
            log.debug("health_check_failed", url=url, error=str(e))
            return False

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()
