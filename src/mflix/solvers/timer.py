"""计时跳转页解码 -- 委托外部服务取回等待页背后的链接"""

from .client import SolverClient
from .exceptions import StageUpstreamError
from .models import SolveResult

STAGE = "timer"


async def solve_timer(url: str, client: SolverClient) -> SolveResult:
    """调用解码服务，返回下一跳链接

    期望响应: {"status": "success", "extracted_link": "..."}

    Raises:
        StageFetchError: 服务不可达或响应不可解析
        StageUpstreamError: 服务返回非 success
    """
    data = await client.call_delegate(client.config.timer_api_url, url, stage=STAGE)
    extracted = data.get("extracted_link")
    if data.get("status") == "success" and isinstance(extracted, str) and extracted:
        return SolveResult(link=extracted, source="Timer API")
    raise StageUpstreamError(
        str(data.get("message") or "External Timer API returned failure status"),
        stage=STAGE,
    )
