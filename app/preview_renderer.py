"""
Record → preview markup.

Pure rendering: the record is only read, and the same record always
produces the same markup. Templates live in templates/, one per style.
"""
from pathlib import Path
from typing import Mapping

from jinja2 import Environment, FileSystemLoader

from schema_cv import SECTION_TITLES

_CSS_PATH = Path(__file__).parent / "static" / "style.css"

STYLES = {
    "professional": "professional.html",
    "modern": "modern.html",
}
FALLBACK_STYLE = "modern"

env = Environment(loader=FileSystemLoader(Path(__file__).parent / "templates"),
                  autoescape=True,
                  finalize=lambda v: "" if v is None else v,
                  trim_blocks=True, lstrip_blocks=True)
env.globals["titles"] = SECTION_TITLES


def template_for(style_id: str) -> str:
    return STYLES.get(style_id, STYLES[FALLBACK_STYLE])


def render(record: Mapping, style_id: str) -> str:
    """Render the preview body for `style_id` (unknown ids use the modern layout)."""
    return env.get_template(template_for(style_id)).render(r=record, style=style_id)


def render_document(record: Mapping, style_id: str, inline: bool = True) -> str:
    """Full standalone HTML page around the preview.  If inline=True, embed CSS in a <style> tag."""
    css_inline = _CSS_PATH.read_text() if inline else ""
    return env.get_template("document.html").render(
        body=render(record, style_id), inline_css=css_inline,
        title=record["personalDetails"]["name"] or "CV")


def render_styled(record: Mapping, style_id: str) -> str:
    """Preview body preceded by its stylesheet, for embedding in a host page."""
    return f"<style>{_CSS_PATH.read_text()}</style>\n{render(record, style_id)}"
