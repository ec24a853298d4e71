"""HBLinks 中转页解析（第一层中转）

按优先级在页面 anchor 中查找下游域名：
1. HubCloud 各 TLD 变体
2. HubDrive 各 TLD 变体
3. 任意引用 hubcloud / hubdrive 的 anchor
"""

from .client import SolverClient
from .exceptions import StageNotFoundError
from .markup import anchor_hrefs, first_href_containing, parse_html
from .models import SolveResult
from .profiles import ClientProfile

STAGE = "hblinks"

HUBCLOUD_TLDS = (".foo", ".fans", ".dev", ".cloud", ".icu", ".lol", ".art", ".in", ".store")
HUBDRIVE_TLDS = (".space", ".pro", ".in")

# (优先级, 品牌, needles 前缀, TLD 列表)
_PRIORITY_TIERS = (
    (1, "HubCloud", "hubcloud", HUBCLOUD_TLDS),
    (2, "HubDrive", "hubdrive", HUBDRIVE_TLDS),
)
_GENERIC_NEEDLES = ("hubcloud", "hubdrive")


def extract_hblinks(html: str) -> SolveResult:
    """从 HBLinks 页面提取下一跳链接

    Raises:
        StageNotFoundError: 没有任何匹配的 anchor
    """
    hrefs = anchor_hrefs(parse_html(html))

    for priority, brand, prefix, tlds in _PRIORITY_TIERS:
        for tld in tlds:
            found = first_href_containing(hrefs, (f"{prefix}{tld}",))
            if found:
                return SolveResult(link=found, source=f"{brand}{tld} (Priority {priority})")

    found = first_href_containing(hrefs, _GENERIC_NEEDLES)
    if found:
        return SolveResult(link=found, source="HubCloud/HubDrive (Generic)")

    raise StageNotFoundError("Not Found", stage=STAGE)


async def solve_hblinks(url: str, client: SolverClient) -> SolveResult:
    html = await client.fetch_html(url, ClientProfile.DESKTOP, stage=STAGE)
    return extract_hblinks(html)
