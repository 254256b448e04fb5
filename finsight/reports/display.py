"""HTML fragments for model-written text shown in the dashboard."""

import html


def insight_html(text: str, css_class: str = "insight-box") -> str:
    """Escape ``text`` and wrap it in a styled box, keeping line breaks."""
    body = html.escape(text or "").replace("\n", "<br>")
    return f'<div class="{css_class}">{body}</div>'
