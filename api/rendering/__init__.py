"""Rendering module for presentation concerns.

This module handles all presentation/rendering logic:
- Derived metric blocks
- Certificate preview view-model and SVG generation
- Form field catalogue for templates

This separates presentation concerns from state handling in services.
"""

from rendering.form_fields import FORM_SECTIONS, editable_field_names
from rendering.metrics import MetricsProjector, project_metrics
from rendering.preview import build_preview, generate_preview_svg, render_title

__all__ = [
    "FORM_SECTIONS",
    "MetricsProjector",
    "build_preview",
    "editable_field_names",
    "generate_preview_svg",
    "project_metrics",
    "render_title",
]
