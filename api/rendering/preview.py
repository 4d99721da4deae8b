"""Certificate preview rendering - view-model and SVG generation.

Everything here is a pure function of the form snapshot: the same
``FormState`` and metrics always produce the same SVG string. Unset
fields resolve to fixed fallbacks so a half-filled form still renders.
"""

import html

from schemas import DerivedMetrics, FormState, PreviewData

TITLE_PLACEHOLDER = "--"
TEMPLATE_IMAGE_HREF = "/static/img/certificate-template.svg"


def render_title(state: FormState) -> str:
    """Build the certificate title, e.g. ``21天学习训练营第12期``."""
    camp_name = state.camp_name or TITLE_PLACEHOLDER
    session_number = state.session_number or TITLE_PLACEHOLDER
    return f"21天{camp_name}第{session_number}期"


def build_preview(state: FormState, metrics: DerivedMetrics) -> PreviewData:
    """Resolve a snapshot and its metrics into what the preview draws."""
    return PreviewData(
        title=render_title(state),
        avatar_href=state.trainee_avatar or None,
        trainee_name=state.trainee_name or "",
        metrics=metrics,
    )


def _avatar_block(avatar_href: str | None) -> str:
    if avatar_href is None:
        return """
  <!-- Avatar placeholder -->
  <circle cx="400" cy="250" r="60" fill="#f3f4f6" stroke="#e5e7eb" stroke-width="2"/>"""

    safe_href = html.escape(avatar_href, quote=True)
    return f"""
  <!-- Trainee avatar -->
  <image x="340" y="190" width="120" height="120" href="{safe_href}" clip-path="url(#avatarClip)" preserveAspectRatio="xMidYMid slice"/>
  <circle cx="400" cy="250" r="60" fill="none" stroke="#f59e0b" stroke-width="3"/>"""


def generate_preview_svg(
    preview: PreviewData,
    template_href: str = TEMPLATE_IMAGE_HREF,
) -> str:
    """Generate the certificate preview as an SVG document.

    Args:
        preview: Resolved preview data from build_preview()
        template_href: URL of the static certificate background

    Returns:
        SVG content as a string
    """
    safe_title = html.escape(preview.title, quote=True)
    safe_name = html.escape(preview.trainee_name, quote=True)
    safe_template = html.escape(template_href, quote=True)

    sans_font = "'PingFang SC', 'Microsoft YaHei', 'Noto Sans CJK SC', sans-serif"

    metric_blocks = []
    for index, metric in enumerate(preview.metrics):
        x = 200 + index * 200
        metric_blocks.append(
            f"""
    <g transform="translate({x}, 0)">
      <text x="0" y="0" font-family="{sans_font}" font-size="40" fill="#b45309" text-anchor="middle" font-weight="bold">{metric.value}</text>
      <text x="0" y="32" font-family="{sans_font}" font-size="16" fill="#6b7280" text-anchor="middle">{html.escape(metric.label)}</text>
    </g>"""
        )

    svg = f"""<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 800 600" width="800" height="600" role="img" aria-label="{safe_title}">
  <defs>
    <clipPath id="avatarClip">
      <circle cx="400" cy="250" r="60"/>
    </clipPath>
  </defs>

  <!-- Certificate template background -->
  <image x="0" y="0" width="800" height="600" href="{safe_template}" preserveAspectRatio="xMidYMid slice"/>

  <!-- Title -->
  <text x="400" y="130" font-family="{sans_font}" font-size="36" fill="#92400e" text-anchor="middle" font-weight="bold">{safe_title}</text>
{_avatar_block(preview.avatar_href)}

  <!-- Trainee name -->
  <text x="400" y="360" font-family="{sans_font}" font-size="28" fill="#1f2937" text-anchor="middle">{safe_name}</text>

  <!-- Metrics -->
  <g transform="translate(0, 460)">{"".join(metric_blocks)}
  </g>
</svg>"""

    return svg
