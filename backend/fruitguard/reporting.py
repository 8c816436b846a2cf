# -*- coding: utf-8 -*-
"""Downloadable diagnosis reports (HTML and PDF)."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from html import escape
from io import BytesIO
from textwrap import wrap
from typing import Any, Dict, Mapping

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.pdfgen import canvas

from fruitguard.presentation import build_result_view

PDF_FONT_REGULAR = "Helvetica"
PDF_FONT_BOLD = "Helvetica-Bold"

REPORT_CSS = """
body { font-family: Georgia, serif; max-width: 760px; margin: 2rem auto; color: #1f2a1f; }
h1 { margin-bottom: 0.2rem; }
.meta { color: #6b7a6b; font-size: 0.9rem; }
.badge { display: inline-block; padding: 0.2rem 0.7rem; border-radius: 999px; font-weight: 600; }
.severity-healthy { background: #e3f4e1; color: #1e6b2a; }
.severity-mild { background: #fdf6d8; color: #8a6d00; }
.severity-moderate { background: #fde8d4; color: #a14d00; }
.severity-severe { background: #fbdcdc; color: #a11b1b; }
section { margin-top: 1.5rem; }
"""


def slugify_filename(value: Any, fallback: str = "fruit-diagnosis") -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", str(value or "").lower()).strip("-")
    return slug or fallback


def _generated_at() -> str:
    return datetime.now(timezone.utc).astimezone().strftime("%d %B %Y %H:%M")


def _require_success(result: Mapping[str, Any]) -> Dict[str, Any]:
    view = build_result_view(result)
    if view["kind"] != "success":
        raise ValueError("Cannot export an error result")
    return view


def render_html_report(result: Mapping[str, Any]) -> str:
    """Return a standalone HTML page describing a success result."""
    view = _require_success(result)
    disease = view["disease"]

    parts = [
        "<!DOCTYPE html>",
        '<html lang="en"><head><meta charset="utf-8">',
        f"<title>FruitGuard - {escape(view['fruit_type'])}</title>",
        f"<style>{REPORT_CSS}</style></head><body>",
        f"<h1>{escape(view['fruit_type'])}</h1>",
        f'<p class="meta">Generated {escape(_generated_at())}</p>',
        f'<span class="badge {view["severity"]["css_class"]}">{escape(view["severity"]["tier"])}</span>',
        "<section><h2>Diagnosis</h2>",
        f"<p><strong>{escape(disease['name'])}</strong>",
    ]
    if disease.get("confidence") is not None:
        parts.append(f" &middot; confidence {escape(str(disease['confidence']))}%")
    parts.append("</p>")
    if disease["description"]:
        parts.append(f"<p>{escape(disease['description'])}</p>")
    if view.get("health_status"):
        parts.append(f"<p>Health status: {escape(str(view['health_status']))}</p>")
    if view.get("damage"):
        damage = view["damage"]
        parts.append(f"<p>Affected area: {damage['percentage']:g}% &ndash; {escape(damage['description'])}</p>")
    parts.append("</section>")

    if view.get("edibility"):
        edibility = view["edibility"]
        verdict = "Safe to eat" if edibility["is_edible"] else "Not safe to eat"
        parts.append(f"<section><h2>Edibility</h2><p><strong>{verdict}</strong></p>")
        if edibility["reason"]:
            parts.append(f"<p>{escape(edibility['reason'])}</p>")
        parts.append("</section>")

    for section in view["treatment_sections"]:
        items = "".join(f"<li>{escape(item)}</li>" for item in section["items"])
        parts.append(f"<section><h2>{escape(section['title'])}</h2><ul>{items}</ul></section>")

    if view.get("notes"):
        parts.append(f"<section><h2>Notes</h2><p>{escape(view['notes'])}</p></section>")

    parts.append("</body></html>")
    return "\n".join(parts)


def render_pdf_report(result: Mapping[str, Any]) -> bytes:
    """Return a PDF document describing a success result."""
    view = _require_success(result)
    disease = view["disease"]

    buffer = BytesIO()
    page_width, page_height = A4
    margin = 2 * cm
    max_chars = 95

    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(f"FruitGuard - {view['fruit_type']}")

    y_position = page_height - margin

    def ensure_space(lines: int = 1, leading: float = 14.0) -> None:
        nonlocal y_position
        if y_position - lines * leading < margin:
            pdf.showPage()
            pdf.setFont(PDF_FONT_REGULAR, 11)
            y_position = page_height - margin

    def write_line(text: str = "", font: str = PDF_FONT_REGULAR, size: int = 11, leading: float = 14.0) -> None:
        nonlocal y_position
        ensure_space(1, leading)
        pdf.setFont(font, size)
        pdf.drawString(margin, y_position, text)
        y_position -= leading

    def write_paragraph(text: str) -> None:
        nonlocal y_position
        if not text:
            return
        for line in wrap(text, max_chars):
            write_line(line)
        y_position -= 4

    def write_heading(text: str, level: int = 1) -> None:
        size = 18 if level == 1 else 14
        leading = 22 if level == 1 else 18
        write_line(text, font=PDF_FONT_BOLD, size=size, leading=leading)

    def write_bullet(text: str) -> None:
        lines = wrap(text, max_chars - 4)
        for idx, line in enumerate(lines):
            write_line(("• " if idx == 0 else "  ") + line)

    write_heading(f"{view['fruit_type']} diagnosis")
    write_paragraph(f"Generated: {_generated_at()}")

    write_heading("Diagnosis", level=2)
    write_paragraph(f"Disease: {disease['name']} ({view['severity']['tier']})")
    if disease.get("confidence") is not None:
        write_paragraph(f"Confidence: {disease['confidence']}%")
    write_paragraph(disease["description"])
    if view.get("health_status"):
        write_paragraph(f"Health status: {view['health_status']}")
    if view.get("damage"):
        write_paragraph(f"Affected area: {view['damage']['percentage']:g}% - {view['damage']['description']}")

    if view.get("edibility"):
        write_heading("Edibility", level=2)
        write_paragraph("Safe to eat" if view["edibility"]["is_edible"] else "Not safe to eat")
        write_paragraph(view["edibility"]["reason"])

    for section in view["treatment_sections"]:
        write_heading(section["title"], level=2)
        for item in section["items"]:
            write_bullet(item)

    if view.get("notes"):
        write_heading("Notes", level=2)
        write_paragraph(view["notes"])

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()
