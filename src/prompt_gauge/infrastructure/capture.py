"""
Content collaborators

Line capture (how a post's text lays out into visual lines) and article text
extraction (the human-readable text of an HTML body).
"""

import re
import textwrap
from abc import ABC, abstractmethod
from html.parser import HTMLParser

from prompt_gauge.domain.value_objects import ArticleInput
from prompt_gauge.errors import CaptureError


class ContentCapture(ABC):
    """Returns the rendered lines of an item's text, in display order"""

    @abstractmethod
    async def capture_lines(self, index: int, text: str) -> list[str]:
        """
        Args:
            index: Dataset index of the item being captured
            text: Raw text content of the item

        Returns:
            One entry per visual line, including empty lines from forced breaks

        Raises:
            CaptureError: If the content cannot be captured
        """
        pass


class TextLayoutCapture(ContentCapture):
    """
    Fixed-width layout of post text

    Paragraphs are split on newlines (empty paragraphs stay as empty lines),
    then wrapped at `width` columns. Every line carries `line_suffix`.
    """

    def __init__(self, width: int = 60, line_suffix: str = "<br>"):
        if width < 1:
            raise ValueError("width must be at least 1.")
        self.width = width
        self.line_suffix = line_suffix

    def layout(self, text: str) -> list[str]:
        if not isinstance(text, str):
            raise CaptureError(f"Cannot lay out content of type {type(text).__name__}")

        lines: list[str] = []
        for paragraph in text.strip().split("\n"):
            if not paragraph.strip():
                lines.append("")
                continue
            lines.extend(textwrap.wrap(paragraph, width=self.width, break_on_hyphens=False) or [""])
        return [line + self.line_suffix for line in lines]

    async def capture_lines(self, index: int, text: str) -> list[str]:
        return self.layout(text)


class DocumentTextExtractor(ABC):
    """Returns the visible text of an article with non-content markup removed"""

    @abstractmethod
    def extract(self, article: ArticleInput) -> str:
        pass


# link and meta are void elements and never carry text
_SKIPPED_TAGS = {"style", "script", "head", "noscript", "template"}
_BLOCK_TAGS = {
    "p", "div", "br", "li", "ul", "ol", "section", "article", "header", "footer",
    "h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "pre", "tr", "table",
}
_SPACES_RE = re.compile(r"[ \t\r\f\v]+")


class _VisibleTextParser(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.parts: list[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in _SKIPPED_TAGS:
            self._skip_depth += 1
        elif tag in _BLOCK_TAGS:
            self.parts.append("\n")

    def handle_endtag(self, tag):
        if tag in _SKIPPED_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
        elif tag in _BLOCK_TAGS and tag != "br":
            self.parts.append("\n")

    def handle_data(self, data):
        if self._skip_depth == 0:
            self.parts.append(data)


class HtmlTextExtractor(DocumentTextExtractor):
    """innerText-style extraction from an HTML body"""

    def extract(self, article: ArticleInput) -> str:
        parser = _VisibleTextParser()
        parser.feed(article.body)
        parser.close()

        lines = [_SPACES_RE.sub(" ", line).strip() for line in "".join(parser.parts).split("\n")]
        kept: list[str] = []
        for line in lines:
            # Collapse runs of blank lines into one
            if not line and (not kept or not kept[-1]):
                continue
            kept.append(line)
        return "\n".join(kept).strip()
