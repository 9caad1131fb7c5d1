"""Self-contained HTML report renderer.

All interpolated values pass through Jinja2 autoescaping, so file contents and
paths cannot inject markup into the page.
"""

from __future__ import annotations

from ..report import ReportModel
from .base import Renderer, create_environment, template_context

TEMPLATE_NAME = "report.html.j2"


class HtmlRenderer(Renderer):
    name = "html"
    extension = "html"

    def __init__(self) -> None:
        self.env = create_environment(autoescape=True)

    def render(self, model: ReportModel) -> str:
        template = self.env.get_template(TEMPLATE_NAME)
        return template.render(**template_context(model))


__all__ = ["HtmlRenderer"]
