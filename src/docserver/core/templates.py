"""Page and error templates.

Templates are Jinja2 documents loaded once at startup, either from
operator-supplied files or from the built-in defaults below.
"""

import logging
from pathlib import Path

from jinja2 import Environment, Template
from markupsafe import Markup

logger = logging.getLogger(__name__)

DEFAULT_PAGE_TEMPLATE = """\
<html>
	<head>
		<title>{{ title }}</title>
		<meta charset="utf-8">
	</head>
	<body>
		<article>
		{{ markup }}
		</article>
	</body>
</html>
"""

DEFAULT_ERROR_TEMPLATE = """\
<html>
	<head>
		<title>Error {{ code }}</title>
		<meta charset="utf-8">
	</head>
	<body>
		<article>
		<h1>Error {{ code }}</h1>
		<p>{{ url }}: {{ msg }}</p>
		</article>
	</body>
</html>
"""


class PageTemplates:
    """Compiled page and error templates.

    Page template variables:
        title: Page title (path relative to the document root)
        markup: Rendered HTML content

    Error template variables:
        url: Requested URL path
        code: HTTP status code
        msg: Short error message
    """

    def __init__(self, page: Template, error: Template) -> None:
        self._page = page
        self._error = error

    @classmethod
    def load(
        cls,
        page_file: Path | None = None,
        error_file: Path | None = None,
    ) -> "PageTemplates":
        """Compile templates from files, falling back to the defaults.

        Args:
            page_file: Optional page template file
            error_file: Optional error template file

        Returns:
            PageTemplates instance

        Raises:
            OSError: If a template file can't be read
            jinja2.TemplateSyntaxError: If a template is invalid
        """
        env = Environment(autoescape=True, keep_trailing_newline=True)
        page = cls._compile(env, page_file, DEFAULT_PAGE_TEMPLATE, "template")
        error = cls._compile(env, error_file, DEFAULT_ERROR_TEMPLATE, "error-template")
        return cls(page, error)

    @staticmethod
    def _compile(env: Environment, path: Path | None, default: str, name: str) -> Template:
        if path is None:
            return env.from_string(default)
        logger.info(f"Using {name}: {path}")
        return env.from_string(path.read_text(encoding="utf-8"))

    def render_page(self, title: str, markup: str) -> str:
        """Wrap rendered Markdown into the page template."""
        return self._page.render(title=title, markup=Markup(markup))

    def render_error(self, url: str, code: int, msg: str) -> str:
        """Render the error page."""
        return self._error.render(url=url, code=code, msg=msg)
