"""Utilities for preparing HTML snippets before rendering in Streamlit."""
import html
from textwrap import dedent


def html_block(template: str) -> str:
    """
    Normalize multi-line HTML so Streamlit doesn't treat it as Markdown code.

    Lines with 4+ leading spaces would otherwise render as code blocks.
    """
    lines = dedent(template).splitlines()
    return "\n".join(line.lstrip() for line in lines).strip()


def status_badge(label: str, color: str) -> str:
    """Small pill with a colored dot, e.g. "● Registration Open"."""
    label = html.escape(label)
    return html_block(f"""
        <span class="status-badge" style="display: inline-flex; gap: 6px; align-items: center;
              padding: 4px 12px; border-radius: 999px; border: 1px solid {color}; color: {color};">
            <span>●</span><span>{label}</span>
        </span>
    """)
