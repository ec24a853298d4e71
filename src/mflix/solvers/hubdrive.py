"""HubDrive 中转页解析（第二层中转）"""

from .client import SolverClient
from .exceptions import StageNotFoundError
from .markup import anchor_hrefs, first_href_containing, parse_html
from .models import SolveResult
from .profiles import ClientProfile

STAGE = "hubdrive"


def extract_hubdrive(html: str) -> SolveResult:
    """依次尝试：a.btn-success(hubcloud) -> a#dl -> 任意 hubcloud/hubcdn anchor

    Raises:
        StageNotFoundError: 页面中没有下载链接
    """
    soup = parse_html(html)

    for anchor in soup.select("a.btn-success[href]"):
        href = anchor.get("href") or ""
        if "hubcloud" in href:
            return SolveResult(link=href, source="HubDrive (btn-success)")

    dl_button = soup.select_one("a#dl[href]")
    if dl_button is not None and dl_button.get("href"):
        return SolveResult(link=dl_button["href"], source="HubDrive (#dl)")

    found = first_href_containing(anchor_hrefs(soup), ("hubcloud", "hubcdn"))
    if found:
        return SolveResult(link=found, source="HubDrive (Generic)")

    raise StageNotFoundError("Download link not found on HubDrive page", stage=STAGE)


async def solve_hubdrive(url: str, client: SolverClient) -> SolveResult:
    html = await client.fetch_html(url, ClientProfile.DESKTOP, stage=STAGE)
    return extract_hubdrive(html)
