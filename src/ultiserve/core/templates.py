"""HTML page templates.

Wraps a Jinja2 environment loaded from the templates bundled with the
package. Autoescaping is always on; templates opt out explicitly for
content that is already HTML.
"""

import dataclasses
from typing import Any

import jinja2

from ultiserve.core.errors import RenderError

INDEX_TEMPLATE = "index.html"
FILE_TEMPLATE = "file.html"


class TemplateRenderer:
    """Renders the named page templates."""

    def __init__(self, environment: jinja2.Environment | None = None) -> None:
        """Initialize renderer.

        Args:
            environment: Jinja2 environment to use. Defaults to one loading
                         the bundled templates.
        """
        self._env = environment or jinja2.Environment(
            loader=jinja2.PackageLoader("ultiserve", "templates"),
            autoescape=jinja2.select_autoescape(["html"]),
            undefined=jinja2.StrictUndefined,
        )

    def render(self, template_name: str, data: Any) -> str:
        """Render a template with structured data.

        Args:
            template_name: Name of the template, e.g. "index.html"
            data: Dataclass instance or mapping exposed as template variables

        Returns:
            Rendered HTML page

        Raises:
            RenderError: If the template is missing or fails to render
        """
        context = dataclasses.asdict(data) if dataclasses.is_dataclass(data) else dict(data)
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except jinja2.TemplateError as e:
            raise RenderError(f"Failed to render {template_name}: {e}") from e
