"""页面扫描测试

测试内容：
1. 候选链接提取：垃圾域名/标签过滤、按 href 去重、名称回退与截断
2. 预览与元数据
3. HtmlPageScanner：移动端身份 + Referer，失败映射为 ScanError
"""

import pytest
from bs4 import BeautifulSoup
from mflix.solvers import HtmlPageScanner, ScanError
from mflix.solvers.scanner import extract_links, extract_metadata, extract_preview, is_junk_label

MOVIE_PAGE = """
<html>
<head>
  <title>Some Movie (2024) - HDHub4u</title>
  <meta property="og:title" content="Some Movie (2024)">
  <meta property="og:image" content="https://img.test/poster.jpg">
</head>
<body>
<main class="page-body">
  <h1 class="entry-title">Some Movie (2024) WEB-DL Full Movie - HDHub4u Download</h1>
  <div class="entry-content">
    <p>Language: Hindi / English</p>
    <h2>: DOWNLOAD LINKS :</h2>
    <div class="links">
      <h3><a href="https://hblinks.test/archives/1">⚡ 480p Hindi WEBRip x264</a></h3>
      <h3><a href="https://gadgetsweb.test/?id=2">720p [Hindi + English] WEB-DL</a></h3>
      <h3><a href="https://hubcloud.foo/drive/3">1080p Hindi English HEVC 10Bit</a></h3>
      <h3><a href="https://hblinks.test/archives/1">480p Hindi Mirror</a></h3>
      <p><a href="https://hubdrive.space/file/4">⚡</a></p>
      <p><a href="https://t.me/joinchannel">Join Telegram</a></p>
      <p><a href="https://hubcloud.foo/how">How To Download</a></p>
      <p><a href="#top">Download back to top</a></p>
      <p><a href="https://www.imdb.com/title/tt1">Download IMDB</a></p>
      <p><a href="https://wp-content.test/x">4K</a></p>
      <p><a href="https://mirror.test/drive/5">4K</a></p>
    </div>
  </div>
</main>
</body>
</html>
"""


@pytest.fixture
def soup() -> BeautifulSoup:
    return BeautifulSoup(MOVIE_PAGE, "html.parser")


class TestExtractLinks:
    """候选链接提取"""

    def test_filters_and_dedupes(self, soup):
        links = extract_links(soup)
        hrefs = [link.link for link in links]

        assert hrefs == [
            "https://hblinks.test/archives/1",
            "https://gadgetsweb.test/?id=2",
            "https://hubcloud.foo/drive/3",
            "https://hubdrive.space/file/4",
        ]

    def test_strips_bolt_from_names(self, soup):
        links = extract_links(soup)
        assert links[0].name == "480p Hindi WEBRip x264"

    def test_short_label_falls_back_to_previous_heading(self, soup):
        """anchor 文本过短时用上一个标题命名"""
        links = extract_links(soup)
        assert links[3].name == "480p Hindi Mirror"

    def test_name_truncated(self):
        long_label = "Download " + "x" * 80
        soup = BeautifulSoup(
            f'<main><a href="https://hubcloud.foo/drive/1">{long_label}</a></main>',
            "html.parser",
        )
        assert len(extract_links(soup)[0].name) == 50

    def test_heading_used_for_empty_label(self):
        html = (
            '<div class="entry-content"><h4>1080p Hindi</h4>'
            '<p><a href="https://hubdrive.space/file/1"></a></p></div>'
        )
        links = extract_links(BeautifulSoup(html, "html.parser"))
        assert links[0].name == "1080p Hindi"

    def test_junk_labels(self):
        assert is_junk_label("  [How To Download]  ")
        assert is_junk_label("4K")
        assert is_junk_label("4K | SDR | HEVC")
        assert not is_junk_label("4K HDR Hindi")


class TestExtractPreview:
    def test_title_and_poster(self, soup):
        preview = extract_preview(soup)
        assert preview.title == "Some Movie (2024) WEB-DL Full Movie"
        assert preview.poster_url == "https://img.test/poster.jpg"

    def test_fallbacks(self):
        soup = BeautifulSoup(
            '<html><head><meta property="og:image" content="https://img.test/logo.png"></head>'
            '<body><div class="entry-content"><img src="https://img.test/cover.jpg"></div></body></html>',
            "html.parser",
        )
        preview = extract_preview(soup)
        assert preview.title == "Unknown Movie"
        assert preview.poster_url == "https://img.test/cover.jpg"


class TestExtractMetadata:
    def test_quality_languages_audio(self, soup):
        metadata = extract_metadata(soup)
        assert metadata.quality == "1080P WEB-DL"
        assert metadata.languages == "English, Hindi"
        assert metadata.audio_label == "Dual Audio"

    def test_language_field_fallback(self):
        html = (
            '<div class="entry-content"><p>Language: Tamil</p>'
            "<p>Quality: 720p BluRay</p></div>"
        )
        metadata = extract_metadata(BeautifulSoup(html, "html.parser"))
        assert metadata.languages == "Tamil"
        assert metadata.audio_label == "Tamil"
        assert metadata.quality == "720P BluRay"

    def test_nothing_found(self):
        metadata = extract_metadata(BeautifulSoup("<p>empty</p>", "html.parser"))
        assert metadata.quality == "Unknown Quality"
        assert metadata.languages == "Not Specified"
        assert metadata.audio_label == "Not Found"


class TestHtmlPageScanner:
    """扫描器"""

    async def test_scan(self, solver_client, fake_web):
        fake_web.page("https://movies.test/some-movie", MOVIE_PAGE)
        scanner = HtmlPageScanner(solver_client)

        result = await scanner.scan("https://movies.test/some-movie")

        assert len(result.links) == 4
        assert result.preview.poster_url == "https://img.test/poster.jpg"
        assert result.metadata.audio_label == "Dual Audio"
        request = fake_web.requests[0]
        assert "Android" in request.headers["user-agent"]
        assert request.headers["referer"] == "https://hdhub4u.fo/"

    async def test_no_links(self, solver_client, fake_web):
        fake_web.page("https://movies.test/empty", "<main><p>nothing</p></main>")

        with pytest.raises(ScanError, match="No links found"):
            await HtmlPageScanner(solver_client).scan("https://movies.test/empty")

    async def test_fetch_failure(self, solver_client):
        with pytest.raises(ScanError, match="Status: 404"):
            await HtmlPageScanner(solver_client).scan("https://movies.test/missing")
