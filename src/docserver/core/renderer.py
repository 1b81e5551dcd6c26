"""Markdown rendering.

Converts Markdown source to an HTML fragment using mistune.
"""

import logging

import mistune

logger = logging.getLogger(__name__)

DEFAULT_PLUGINS = ("table", "strikethrough", "url", "task_lists")


class MarkdownRenderer:
    """Render Markdown bytes to HTML bytes.

    Total over any input: undecodable bytes are replaced rather than
    rejected.
    """

    def __init__(self, plugins: tuple[str, ...] = DEFAULT_PLUGINS) -> None:
        """Initialize the renderer.

        Args:
            plugins: mistune plugin names to enable
        """
        self.markdown = mistune.create_markdown(
            escape=False,
            plugins=list(plugins),
        )

    def render(self, source: bytes) -> bytes:
        """Render Markdown source.

        Args:
            source: Markdown document bytes (UTF-8)

        Returns:
            HTML fragment as UTF-8 bytes
        """
        text = source.decode("utf-8", errors="replace")
        logger.debug(f"Converting {len(text)} characters of markdown")
        html = self.markdown(text)
        return html.encode("utf-8")
