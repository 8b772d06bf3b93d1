"""Shared renderer types: output formats, render options and the renderer shape."""

from enum import Enum
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class OutputFormat(str, Enum):
    JSON = "json"
    MARKDOWN = "markdown"
    TERMINAL = "terminal"


class RenderContext(BaseModel):
    """Options for one report.

    ``verbose`` adds the per-resource listing and finding recommendations.
    ``indent`` of 0 gives single-line JSON.
    """

    model_config = {"frozen": True}

    format: OutputFormat = Field(default=OutputFormat.TERMINAL, description="Report format")
    output_path: Path | None = Field(default=None, description="Report file, stdout when unset")
    verbose: bool = Field(default=False, description="Include resource listings")
    color: bool = Field(default=True, description="Keep ANSI styles in terminal reports")
    indent: int = Field(default=2, description="JSON indentation, 0 for compact")


@runtime_checkable
class Renderer(Protocol):
    """Anything that turns an operation output or rule listing into report text."""

    @property
    def format(self) -> OutputFormat: ...

    def render(self, data: Any, context: RenderContext) -> str: ...

    def render_to_file(self, data: Any, context: RenderContext) -> None: ...


class BaseRenderer:
    """Writes ``render`` output to ``context.output_path`` as UTF-8."""

    def render_to_file(self, data: Any, context: RenderContext) -> None:
        if context.output_path is None:
            raise ValueError("output_path must be set in context for file rendering")
        context.output_path.write_text(self.render(data, context), encoding="utf-8")

    def render(self, data: Any, context: RenderContext) -> str:
        raise NotImplementedError
