"""HTML 解析辅助 -- BeautifulSoup（html.parser）"""

from collections.abc import Iterable

from bs4 import BeautifulSoup


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def anchor_hrefs(soup: BeautifulSoup) -> list[str]:
    """按文档顺序返回所有非空 href"""
    hrefs = []
    for anchor in soup.find_all("a", href=True):
        href = anchor.get("href") or ""
        if href:
            hrefs.append(href)
    return hrefs


def first_href_containing(hrefs: Iterable[str], needles: Iterable[str]) -> str | None:
    """返回第一个包含任一 needle 的 href"""
    needles = tuple(needles)
    for href in hrefs:
        if any(needle in href for needle in needles):
            return href
    return None
