"""Markdown report renderer backed by a Jinja2 template."""

from __future__ import annotations

from ..report import ReportModel
from .base import Renderer, create_environment, template_context

TEMPLATE_NAME = "report.md.j2"


class MarkdownRenderer(Renderer):
    name = "markdown"
    extension = "md"

    def __init__(self) -> None:
        self.env = create_environment(autoescape=False)

    def render(self, model: ReportModel) -> str:
        template = self.env.get_template(TEMPLATE_NAME)
        return template.render(**template_context(model))


__all__ = ["MarkdownRenderer"]
