"""页面扫描 -- 从内容页提取候选下载链接、预览与元数据

只有 PageScanner 接口是约定；下面的启发式规则尽力而为，
站点改版时允许失效（表现为 ScanError 或较差的元数据）。
"""

import re
from typing import Protocol

import structlog
from bs4 import BeautifulSoup, Tag
from mflix.core.config import LINK_NAME_MAX_LENGTH
from mflix.core.models import MovieMetadata, MoviePreview
from pydantic import BaseModel, Field

from .client import SolverClient
from .exceptions import ScanError, StageFetchError
from .markup import parse_html
from .profiles import ClientProfile

log = structlog.get_logger()

STAGE = "scanner"

JUNK_DOMAINS = (
    "catimages",
    "imdb.com",
    "googleusercontent",
    "instagram.com",
    "facebook.com",
    "wp-content",
    "wpshopmart",
)

JUNK_LABELS = (
    "how to download",
    "how to watch",
    "join telegram",
    "join our telegram",
    "request movie",
    "4k | sdr | hevc",
    "4k | sdr",
    "sdr | hevc",
)
JUNK_EXACT_LABELS = ("4k", "sdr", "hevc")

TARGET_DOMAINS = ("hblinks", "hubdrive", "hubcdn", "hubcloud", "gdflix", "drivehub")
DOWNLOAD_WORDS = ("DOWNLOAD", "720P", "480P", "1080P", "4K", "DIRECT", "GDRIVE")

# 元数据统计只看这些域名的按钮
CDN_DOMAINS = (
    "hubcdn",
    "hubdrive",
    "gadgetsweb",
    "hubstream",
    "hdstream",
    "hblinks",
    "hubcloud",
    "gdflix",
    "drivehub",
)

VALID_LANGUAGES = (
    "Hindi",
    "English",
    "Tamil",
    "Telugu",
    "Malayalam",
    "Kannada",
    "Punjabi",
    "Marathi",
    "Bengali",
    "Spanish",
    "French",
    "Korean",
    "Japanese",
    "Chinese",
)

RESOLUTION_RANK = {"480P": 480, "720P": 720, "1080P": 1080, "2160P": 2160, "4K": 2160}

FORMAT_PRIORITY = {"WEB-DL": 5, "BluRay": 4, "WEBRip": 3, "HEVC": 2, "x264": 1, "HDTC": 0, "10Bit": 0}

_FORMAT_PATTERNS = (
    (re.compile(r"WEB-DL", re.I), "WEB-DL"),
    (re.compile(r"BLURAY|BLU-RAY", re.I), "BluRay"),
    (re.compile(r"WEBRIP|WEB-RIP", re.I), "WEBRip"),
    (re.compile(r"HDTC|HD-TC", re.I), "HDTC"),
    (re.compile(r"HEVC|H\.265|x265", re.I), "HEVC"),
    (re.compile(r"x264|H\.264", re.I), "x264"),
    (re.compile(r"10[- ]?Bit", re.I), "10Bit"),
)

_RESOLUTION_RE = re.compile(r"(480p|720p|1080p|2160p|4K)", re.I)
_MULTI_AUDIO_RE = re.compile(r"MULTi[\s\S]*?\[([\s\S]*?HINDI[\s\S]*?)\]", re.I)
_LANGUAGE_FIELD_RE = re.compile(r"Language\s*:(.+?)(?:\n|/|$)", re.I)
_QUALITY_FIELD_RE = re.compile(r"Quality\s*:(.+?)(?:\n|$)", re.I)
_TITLE_SUFFIX_RE = re.compile(r"\s+[-–|]\s+.*?(?:HDHub|Download|Free).*$", re.I)
_LANGUAGE_RES = {lang: re.compile(rf"\b{lang}\b", re.I) for lang in VALID_LANGUAGES}


class ScannedLink(BaseModel):
    """扫描得到的候选链接"""

    name: str
    link: str


class ScanResult(BaseModel):
    links: list[ScannedLink] = Field(default_factory=list)
    metadata: MovieMetadata = Field(default_factory=MovieMetadata)
    preview: MoviePreview = Field(default_factory=MoviePreview)


class PageScanner(Protocol):
    """页面扫描器接口"""

    async def scan(self, url: str) -> ScanResult: ...


def is_junk_label(text: str) -> bool:
    lower = text.lower().strip()
    if any(junk in lower for junk in JUNK_LABELS):
        return True
    return lower in JUNK_EXACT_LABELS


def _nearest_block(anchor: Tag) -> Tag | None:
    return anchor.find_parent(["p", "div", "h3", "h4"])


def _fallback_name(anchor: Tag) -> str:
    """anchor 文本过短时，用上一个标题或所在段落命名"""
    block = _nearest_block(anchor)
    if block is None:
        return "Download Link"
    heading = block.find_previous_sibling()
    if heading is not None and heading.name in ("h3", "h4", "h5", "strong"):
        text = heading.get_text().strip()
        if text:
            return text
    return block.get_text().strip() or "Download Link"


def extract_links(soup: BeautifulSoup) -> list[ScannedLink]:
    """提取候选下载链接（按 href 去重，保持文档顺序）"""
    found: list[ScannedLink] = []
    seen: set[str] = set()

    for anchor in soup.select(".entry-content a[href], main a[href]"):
        href = anchor.get("href") or ""
        text = anchor.get_text().strip()

        if not href or href.startswith("#") or any(junk in href for junk in JUNK_DOMAINS):
            continue
        if is_junk_label(text):
            continue
        block = _nearest_block(anchor)
        if block is not None and is_junk_label(block.get_text()):
            continue

        is_target = any(domain in href for domain in TARGET_DOMAINS)
        is_download = any(word in text.upper() for word in DOWNLOAD_WORDS)
        if not (is_target or is_download) or href in seen:
            continue

        name = text.replace("⚡", "").strip()
        if len(name) < 2:
            name = _fallback_name(anchor)
        if is_junk_label(name):
            continue

        seen.add(href)
        found.append(ScannedLink(name=name[:LINK_NAME_MAX_LENGTH], link=href))

    return found


def extract_preview(soup: BeautifulSoup) -> MoviePreview:
    heading = soup.select_one("h1.entry-title, h1.post-title, h1")
    title = heading.get_text().strip() if heading is not None else ""
    if not title:
        og_title = soup.select_one('meta[property="og:title"]')
        title = (og_title.get("content") if og_title is not None else "") or ""
        if not title and soup.title is not None:
            title = soup.title.get_text().strip()
        title = title or "Unknown Movie"
    title = _TITLE_SUFFIX_RE.sub("", title).strip()

    poster_url = None
    og_image = soup.select_one('meta[property="og:image"]')
    image = og_image.get("content") if og_image is not None else None
    if image and "logo" not in image and "favicon" not in image:
        poster_url = image
    else:
        img = soup.select_one(".entry-content img, .post-content img, main img")
        src = img.get("src") if img is not None else None
        if src and "logo" not in src and "icon" not in src:
            poster_url = src

    return MoviePreview(title=title, poster_url=poster_url)


def _collect_languages(text: str, found: set[str]) -> None:
    for lang, pattern in _LANGUAGE_RES.items():
        if pattern.search(text):
            found.add(lang)


def _better_format(current: str, candidate: str) -> str:
    if FORMAT_PRIORITY.get(candidate, -1) > FORMAT_PRIORITY.get(current, -1):
        return candidate
    return current


def _match_format(text: str) -> str | None:
    for pattern, name in _FORMAT_PATTERNS:
        if pattern.search(text):
            return name
    return None


def extract_metadata(soup: BeautifulSoup) -> MovieMetadata:
    """统计下载按钮上的分辨率、格式与音轨语言"""
    main = soup.select_one("main.page-body") or soup.select_one("div.entry-content") or soup

    section: Tag | BeautifulSoup = main
    for heading in main.find_all(["h2", "h3", "h4"]):
        if "DOWNLOAD LINKS" in heading.get_text().upper() and heading.parent is not None:
            section = heading.parent
            break

    languages: set[str] = set()
    resolution = ""
    fmt = ""

    for anchor in section.find_all("a", href=True):
        href = (anchor.get("href") or "").lower()
        if not any(domain in href for domain in CDN_DOMAINS):
            continue
        block = anchor.find_parent(["h3", "h4", "p"])
        label = (block if block is not None else anchor).get_text().strip()

        _collect_languages(label, languages)

        if match := _RESOLUTION_RE.search(label):
            res = match.group(1).upper()
            if RESOLUTION_RANK[res] > RESOLUTION_RANK.get(resolution, 0):
                resolution = res

        if (candidate := _match_format(label)) is not None:
            fmt = _better_format(fmt, candidate)

    if match := _MULTI_AUDIO_RE.search(section.get_text()):
        _collect_languages(match.group(1), languages)

    if not languages:
        for elem in main.find_all(["div", "span", "p"]):
            if match := _LANGUAGE_FIELD_RE.search(elem.get_text()):
                _collect_languages(match.group(1), languages)
                break

    if not resolution:
        for elem in main.find_all(["div", "span", "p"]):
            if match := _QUALITY_FIELD_RE.search(elem.get_text()):
                line = match.group(1)
                if res_match := _RESOLUTION_RE.search(line):
                    resolution = res_match.group(1).upper()
                fmt = _match_format(line) or fmt
                break

    ordered = sorted(languages)
    if len(ordered) == 1:
        audio_label = ordered[0]
    elif len(ordered) == 2:
        audio_label = "Dual Audio"
    elif len(ordered) >= 3:
        audio_label = "Multi Audio"
    else:
        audio_label = "Not Found"

    return MovieMetadata(
        quality=f"{resolution} {fmt}".strip() if resolution else "Unknown Quality",
        languages=", ".join(ordered) if ordered else "Not Specified",
        audio_label=audio_label,
    )


class HtmlPageScanner:
    """基于 BeautifulSoup 的页面扫描器"""

    def __init__(self, client: SolverClient) -> None:
        self._client = client

    async def scan(self, url: str) -> ScanResult:
        """抓取并扫描内容页

        Raises:
            ScanError: 页面取回失败或没有找到任何候选链接
        """
        try:
            html = await self._client.fetch_html(
                url,
                ClientProfile.MOBILE,
                stage=STAGE,
                extra_headers={"Referer": self._client.config.scanner_referer},
            )
        except StageFetchError as e:
            raise ScanError(e.message) from e

        soup = parse_html(html)
        links = extract_links(soup)
        if not links:
            raise ScanError("No links found. The page structure might have changed.")

        log.info("page_scanned", url=url, link_count=len(links))
        return ScanResult(
            links=links,
            metadata=extract_metadata(soup),
            preview=extract_preview(soup),
        )
