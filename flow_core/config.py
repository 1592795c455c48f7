"""
Layout configuration for flow projection.

Defaults reproduce the editor's canvas: a three-color depth palette,
top-to-bottom ranks, standard 250x80 step cards and 100x50 branch pills.
Every value can be overridden through FLOWTREE_LAYOUT_* environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LayoutConfig(BaseSettings):
    """Projection and solver parameters."""

    model_config = SettingsConfigDict(env_prefix="FLOWTREE_LAYOUT_", extra="ignore")

    # Depth colors: deep pink -> deep orange -> green (cycling)
    palette: list[str] = Field(
        default_factory=lambda: ["#e91e63", "#ff5722", "#4caf50"],
        min_length=1,
        description="Layer colors indexed by depth modulo palette size",
    )

    # Solver parameters
    rank_dir: str = Field(default="TB", pattern=r"^(TB|LR)$", description="Rank direction")
    rank_sep: float = Field(default=80, ge=0, description="Gap between ranks in pixels")
    node_sep: float = Field(default=60, ge=0, description="Gap between nodes of one rank")

    # Node sizes
    node_width: float = Field(default=250, gt=0)
    node_height: float = Field(default=80, gt=0)
    connector_width: float = Field(default=100, gt=0)
    connector_height: float = Field(default=50, gt=0)
