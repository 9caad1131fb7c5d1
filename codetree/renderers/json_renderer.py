"""JSON report renderer; emits the canonical report dictionary."""

from __future__ import annotations

import json

from ..report import ReportModel
from .base import Renderer


class JsonRenderer(Renderer):
    name = "json"
    extension = "json"

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def render(self, model: ReportModel) -> str:
        return json.dumps(model.to_dict(), indent=self.indent, ensure_ascii=False) + "\n"


__all__ = ["JsonRenderer"]
