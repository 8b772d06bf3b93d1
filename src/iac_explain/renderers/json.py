"""JSON renderer for iac-explain output."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from iac_explain.renderers.base import BaseRenderer, OutputFormat, RenderContext


class JSONRenderer(BaseRenderer):
    """Renderer for JSON output format.

    Models are dumped with their wire aliases, so findings serialize with
    ``ruleId`` and friends.

    Example:
        renderer = JSONRenderer()
        json_str = renderer.render(output, RenderContext(format=OutputFormat.JSON))
    """

    @property
    def format(self) -> OutputFormat:
        return OutputFormat.JSON

    def render(self, data: Any, context: RenderContext) -> str:
        """Render data to a JSON string."""
        return json.dumps(
            self.to_jsonable(data),
            indent=context.indent if context.indent else None,
            default=self._json_serializer,
            ensure_ascii=False,
        )

    @classmethod
    def to_jsonable(cls, data: Any) -> Any:
        """Convert models (also inside lists and dicts) to plain JSON data."""
        if isinstance(data, BaseModel):
            return data.model_dump(mode="json", by_alias=True, exclude_none=True)
        if isinstance(data, (list, tuple)):
            return [cls.to_jsonable(item) for item in data]
        if isinstance(data, dict):
            return {key: cls.to_jsonable(value) for key, value in data.items()}
        return data

    @staticmethod
    def _json_serializer(obj: Any) -> Any:
        """Custom JSON serializer for non-standard types."""
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, Path):
            return str(obj)
        if isinstance(obj, set):
            return sorted(obj)
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
