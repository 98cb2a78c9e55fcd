"""Jinja2 template loader for rendered pages."""

from importlib.resources import files
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, select_autoescape

from folio.core.utils import slugify
from folio.engine import filters


class TemplateLoader:
    """Loads and renders the HTML page templates.

    Templates live in ``folio/engine/templates`` unless another directory is
    given. Undefined variables are errors so that a typo in a template cannot
    silently publish empty fields.
    """

    def __init__(self, template_dir: Path | None = None) -> None:
        if template_dir is None:
            template_dir = Path(str(files("folio.engine").joinpath("templates")))

        self.template_dir = template_dir
        self.env = Environment(
            loader=FileSystemLoader(self.template_dir),
            autoescape=select_autoescape(["html", "jinja2"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self._register_filters()

    def _register_filters(self) -> None:
        self.env.filters["page_path"] = filters.page_path
        self.env.filters["root_prefix"] = filters.root_prefix
        self.env.filters["slugify"] = slugify

    def load_template(self, template_name: str) -> Template:
        """Load a template by name.

        Raises:
            TemplateNotFound: If template does not exist

        """
        return self.env.get_template(template_name)

    def render_template(self, template_name: str, **context: Any) -> str:
        return self.load_template(template_name).render(**context)
