"""HubCDN 直链解析（本地实现，不依赖外部服务）

非 /dl/ 链接先取落地页，从 `var reurl = "..."` 的 r 参数 base64 解码出目标页；
目标页中 a#vd 或 window.location.href 赋值即为直链。
"""

import base64
import binascii
import re
from urllib.parse import parse_qs, urlsplit

from .client import SolverClient
from .exceptions import StageNotFoundError
from .markup import parse_html
from .models import SolveResult
from .profiles import ClientProfile

STAGE = "hubcdn"

_REURL_RE = re.compile(r'var reurl = "(.*?)"')
_LOCATION_RE = re.compile(r'window\.location\.href\s*=\s*"(.*?)"')


def decode_reurl(html: str) -> str | None:
    """解出落地页脚本中隐藏的目标 URL，失败返回 None"""
    match = _REURL_RE.search(html)
    if not match:
        return None

    redirect_url = match.group(1).replace("&amp;", "&")
    values = parse_qs(urlsplit(redirect_url).query).get("r")
    if not values:
        return None

    # parse_qs 会把 '+' 还原为空格
    encoded = values[0].replace(" ", "+").replace("-", "+").replace("_", "/")
    padded = encoded + "=" * (-len(encoded) % 4)
    try:
        return base64.b64decode(padded).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None


def extract_direct_link(html: str) -> SolveResult:
    """从目标页提取直链

    Raises:
        StageNotFoundError: 既没有 a#vd 也没有跳转脚本
    """
    anchor = parse_html(html).select_one("a#vd[href]")
    if anchor is not None and anchor.get("href"):
        return SolveResult(link=anchor["href"], source="HubCDN", is_direct=True)

    match = _LOCATION_RE.search(html)
    if match:
        return SolveResult(link=match.group(1), source="HubCDN (script)", is_direct=True)

    raise StageNotFoundError("Link id='vd' not found in HTML", stage=STAGE)


async def solve_hubcdn(url: str, client: SolverClient) -> SolveResult:
    target_url = url
    if "/dl/" not in url:
        landing = await client.fetch_html(url, ClientProfile.MOBILE, stage=STAGE)
        target_url = decode_reurl(landing)
        if target_url is None:
            # 落地页本身即目标页
            return extract_direct_link(landing)

    html = await client.fetch_html(target_url, ClientProfile.MOBILE, stage=STAGE)
    return extract_direct_link(html)
