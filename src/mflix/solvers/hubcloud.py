"""HubCloud 直链解析 -- 完全委托外部解析服务

服务返回最佳链接及全部备选按钮；两者都必须向下游传递，界面同时展示。
"""

import structlog
from mflix.core.models import AlternativeButton
from pydantic import ValidationError

from .client import SolverClient
from .exceptions import StageUpstreamError
from .models import SolveResult

log = structlog.get_logger()

STAGE = "hubcloud"


def _parse_buttons(raw: object) -> list[AlternativeButton]:
    if not isinstance(raw, list):
        return []
    buttons = []
    for item in raw:
        if not isinstance(item, dict) or not item.get("download_link"):
            continue
        try:
            buttons.append(
                AlternativeButton.model_validate(
                    {**item, "button_name": item.get("button_name") or ""}
                )
            )
        except ValidationError:
            log.debug("hubcloud_button_skipped", button=item)
    return buttons


async def solve_hubcloud(url: str, client: SolverClient) -> SolveResult:
    """调用直链解析服务

    期望响应:
        {"status": "success", "best_button_name": "...",
         "best_download_link": "...", "all_available_buttons": [...]}

    Raises:
        StageFetchError: 服务不可达或响应不可解析
        StageUpstreamError: 服务未给出直链
    """
    data = await client.call_delegate(client.config.resolver_api_url, url, stage=STAGE)

    best_link = data.get("best_download_link")
    if data.get("status") == "success" and isinstance(best_link, str) and best_link:
        button_name = data.get("best_button_name")
        if not isinstance(button_name, str) or not button_name:
            button_name = None
        log.info("hubcloud_resolved", button_name=button_name)
        return SolveResult(
            link=best_link,
            source=button_name or "Best Button",
            is_direct=True,
            button_name=button_name,
            buttons=_parse_buttons(data.get("all_available_buttons")),
        )

    raise StageUpstreamError(
        str(data.get("message") or "No download link from API"),
        stage=STAGE,
    )
