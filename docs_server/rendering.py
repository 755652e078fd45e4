"""Markdown to HTML rendering with syntax highlighting."""
import markdown
from pygments.formatters import HtmlFormatter

NOT_FOUND_PREFIX = "Doc Not Found: "

EXTENSIONS = [
    "tables",
    "fenced_code",
    "toc",
    "attr_list",
    "codehilite",
]


class MarkdownRenderer:
    """Renders upstream markdown; code blocks are highlighted by Pygments."""

    def __init__(self, css_class: str = "highlight"):
        self._md = markdown.Markdown(
            extensions=EXTENSIONS,
            extension_configs={
                "codehilite": {
                    "css_class": css_class,
                    "guess_lang": True,
                    "pygments_formatter": HtmlFormatter,
                }
            },
        )

    def __call__(self, text: str) -> str:
        return self.render(text)

    def render(self, text: str) -> str:
        # Markdown instances keep state (toc, footnotes) between conversions
        self._md.reset()
        return self._md.convert(text)


def not_found_markdown(path: str) -> str:
    """Markdown for the stub served when an upstream file is absent."""
    return f"# {NOT_FOUND_PREFIX}{path}"
