from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
import io

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from prima_fpa.services.kpis import KpiResult
from prima_fpa.services.variance import VarianceRow, VarianceSummary
from prima_fpa.utils.formatting import format_currency, format_percentage, format_value, variance_icon


def _draw_header(pdf: canvas.Canvas, title: str, subtitle: str) -> None:
    pdf.setFont("Helvetica-Bold", 14)
    pdf.drawString(50, 800, title)
    pdf.setFont("Helvetica", 10)
    pdf.drawString(50, 785, subtitle)
    pdf.line(50, 780, 550, 780)


def build_kpi_pack(
    *,
    period: str,
    kpis: Sequence[KpiResult],
    variance_rows: Sequence[VarianceRow],
    summary: VarianceSummary,
    currency: str = "EUR",
    max_rows: int = 25,
) -> bytes:
    """Render the KPI cards and the largest variances for one period as a PDF."""
    stream = io.BytesIO()
    pdf = canvas.Canvas(stream, pagesize=A4)
    generated = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    _draw_header(pdf, f"FP&A KPI Pack - {period}", f"Generated {generated}")

    y = 755
    pdf.setFont("Helvetica-Bold", 11)
    pdf.drawString(50, y, "Key ratios")
    y -= 18
    for row in kpis:
        pdf.setFont("Helvetica", 10)
        pdf.drawString(50, y, row.name)
        pdf.drawRightString(300, y, format_value(row.value, row.format, currency=currency))
        if row.delta is not None:
            delta = row.delta.absolute_variance
            pdf.drawString(
                320,
                y,
                f"{variance_icon(delta)} {format_percentage(delta, show_sign=True)} vs prior",
            )
        y -= 16

    y -= 10
    pdf.setFont("Helvetica-Bold", 11)
    pdf.drawString(50, y, "Variance: actual vs comparison")
    y -= 18
    pdf.setFont("Helvetica-Bold", 9)
    pdf.drawString(50, y, "Entity")
    pdf.drawRightString(270, y, "Actual")
    pdf.drawRightString(360, y, "Comparison")
    pdf.drawRightString(450, y, "Variance")
    pdf.drawRightString(530, y, "%")
    y -= 14
    pdf.setFont("Helvetica", 9)

    for row in variance_rows[:max_rows]:
        if y < 80:
            pdf.showPage()
            y = 800
            pdf.setFont("Helvetica", 9)
        label = " / ".join(row.key) or "Total"
        marker = " *" if row.significant else ""
        pdf.drawString(50, y, f"{label}{marker}")
        pdf.drawRightString(270, y, format_currency(row.variance.actual, currency))
        pdf.drawRightString(360, y, format_currency(row.variance.comparison, currency))
        pdf.drawRightString(450, y, format_currency(row.variance.absolute_variance, currency, show_sign=True))
        pdf.drawRightString(530, y, format_percentage(row.variance.percent_variance, show_sign=True))
        y -= 14

    y -= 10
    pdf.setFont("Helvetica", 10)
    pdf.drawString(
        50,
        y,
        (
            f"Favourable: {summary.favorable_count} | Unfavourable: {summary.unfavorable_count} | "
            f"Net impact: {format_currency(summary.net_variance, currency, show_sign=True)}"
        ),
    )
    pdf.save()
    return stream.getvalue()
