"""Local Jinja2 views used when the provider cannot render a template."""

from pathlib import Path
from typing import Any, NamedTuple, Optional, Union

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from mandrill_mailer.mailer.errors import ViewNotFoundError


class RenderedBody(NamedTuple):
    """Rendered message bodies."""

    html: Optional[str]
    text: Optional[str] = None


class ViewRenderer:
    """Render ``<name>.html`` and ``<name>.txt`` views from a directory."""

    def __init__(self, views_path: Union[str, Path]) -> None:
        self.views_path = Path(views_path)
        self.env = Environment(
            loader=FileSystemLoader(str(self.views_path)),
            autoescape=select_autoescape(["html", "htm"]),
        )

    def render(self, name: str, params: dict[str, Any]) -> RenderedBody:
        """Render the views for ``name``.

        Raises:
            ViewNotFoundError: If neither an html nor a text view exists
        """
        html = self._render_optional(f"{name}.html", params)
        text = self._render_optional(f"{name}.txt", params)

        if html is None and text is None:
            raise ViewNotFoundError(f"No view found for {name!r} in {self.views_path}")

        return RenderedBody(html=html, text=text)

    def _render_optional(self, filename: str, params: dict[str, Any]) -> Optional[str]:
        try:
            template = self.env.get_template(filename)
        except TemplateNotFound:
            return None
        return template.render(**params)
