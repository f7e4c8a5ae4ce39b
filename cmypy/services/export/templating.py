import datetime
from typing import Any, Dict
from jinja2 import Environment, BaseLoader, TemplateError
from cmypy.domain.models import FilterDelta
from cmypy.features.filtration.logic import format_value

DEFAULT_FILENAME_PATTERN = "filtered_{{ original_name }}"


class FilenameTemplater:
    """
    Handles generation of filenames using Jinja2 templates.
    """

    def __init__(self) -> None:
        # Minimal environment for performance and safety
        self.env = Environment(
            loader=BaseLoader(),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, pattern: str, context: Dict[str, Any]) -> str:
        """
        Renders the filename pattern with the provided context.
        Falls back to a safe default if rendering fails.
        """
        try:
            template = self.env.from_string(pattern)
            render_context = {"date": datetime.date.today().isoformat(), **context}
            rendered = template.render(render_context).strip()
            if not rendered:
                raise ValueError("Template rendered to empty string")
            return rendered
        except (TemplateError, ValueError):
            original = context.get("original_name", "output")
            return f"filtered_{original}"


def render_export_filename(
    original_name: str, delta: FilterDelta, pattern: str = DEFAULT_FILENAME_PATTERN
) -> str:
    context = {
        "original_name": original_name,
        "c": format_value(delta.c),
        "m": format_value(delta.m),
        "y": format_value(delta.y),
    }
    return FilenameTemplater().render(pattern, context)
