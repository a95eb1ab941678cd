"""Formatting options shared by summaries, lineage context and tree rendering."""

from pydantic import BaseModel, Field

MIN_CONTEXT_LENGTH = 80


class RenderOptions(BaseModel):
    """Options controlling how node costs are displayed."""

    cost_unit: str = Field(default="min", max_length=20, description="Unit label appended to costs")
    precision: int = Field(default=2, ge=0, le=10, description="Maximum decimal places shown")
    show_costs: bool = Field(default=True, description="Include costs in labels")
    max_context_length: int = Field(default=1000, ge=MIN_CONTEXT_LENGTH, description="Maximum length of lineage context text")

    def format_cost(self, cost: float) -> str:
        """Format a cost with trailing zeros dropped, e.g. ``3 min`` or ``2.5 min``."""
        text = f"{cost:.{self.precision}f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return f"{text} {self.cost_unit}".rstrip()
