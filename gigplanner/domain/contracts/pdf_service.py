"""Contract PDF generation service"""

import io
import logging
from datetime import datetime
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ...config import COMPANY_NAME
from ...models import Contract
from .rendering import contract_period, contract_terms

logger = logging.getLogger(__name__)


class ContractPDFService:
    """Generate a printable PDF of a musician contract"""

    def __init__(self, contract: Contract):
        self.contract = contract

        # PDF settings
        self.page_width, self.page_height = letter
        self.margin = 0.75 * inch

        # Brand color (indigo)
        self.brand_color = colors.HexColor("#4f46e5")
        self.dark_gray = colors.HexColor("#1e293b")
        self.light_gray = colors.HexColor("#f1f5f9")

    def generate(self) -> bytes:
        """Generate PDF and return bytes"""
        contract = self.contract
        logger.info(f"📄 Generating contract PDF for contract {contract.id}")

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            rightMargin=self.margin,
            leftMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin,
            title=f"Contract #{contract.id} - {contract_period(contract)}",
        )

        story = []
        styles = getSampleStyleSheet()

        title_style = ParagraphStyle(
            "ContractTitle",
            parent=styles["Heading1"],
            fontSize=22,
            textColor=self.brand_color,
            spaceAfter=6,
            alignment=1,  # Center
        )
        heading_style = ParagraphStyle(
            "ContractHeading",
            parent=styles["Heading2"],
            fontSize=14,
            textColor=self.dark_gray,
            spaceAfter=8,
            spaceBefore=18,
        )
        body_style = ParagraphStyle(
            "ContractBody",
            parent=styles["Normal"],
            fontSize=10,
            textColor=self.dark_gray,
            spaceAfter=6,
        )
        signature_style = ParagraphStyle(
            "ContractSignature",
            parent=styles["Normal"],
            fontName="Helvetica-Oblique",
            fontSize=12,
            textColor=self.dark_gray,
        )

        # Header
        story.append(Paragraph(escape(COMPANY_NAME), title_style))
        story.append(Paragraph("Monthly Musician Agreement", body_style))
        story.append(Spacer(1, 0.3 * inch))

        musician = contract.musician
        info_data = [
            ["Contract:", f"#{contract.id}"],
            ["Musician:", musician.name if musician else "Unknown"],
            ["Period:", contract_period(contract)],
            ["Status:", contract.status.capitalize()],
            ["Date:", datetime.utcnow().strftime("%B %d, %Y")],
        ]
        info_table = Table(info_data, colWidths=[1.5 * inch, 4.5 * inch])
        info_table.setStyle(
            TableStyle(
                [
                    ("FONT", (0, 0), (0, -1), "Helvetica-Bold", 10),
                    ("FONT", (1, 0), (1, -1), "Helvetica", 10),
                    ("TEXTCOLOR", (0, 0), (-1, -1), self.dark_gray),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                ]
            )
        )
        story.append(info_table)

        # Performance dates
        story.append(Paragraph("PERFORMANCE DATES", heading_style))
        table_data = [["Date", "Venue", "Time", "Fee", "Response"]]
        for line in contract.lines:
            table_data.append(
                [
                    line.date.strftime("%a %d %b %Y"),
                    line.venue_name or "-",
                    f"{line.start_time or '--'} - {line.end_time or '--'}",
                    f"${line.fee:,.2f}",
                    (line.status or "pending").capitalize(),
                ]
            )
        table_data.append(["", "", "Total", f"${contract.amount:,.2f}", ""])

        dates_table = Table(
            table_data,
            colWidths=[1.4 * inch, 2.1 * inch, 1.2 * inch, 1.0 * inch, 0.8 * inch],
            repeatRows=1,
        )
        dates_table.setStyle(
            TableStyle(
                [
                    # Header row
                    ("BACKGROUND", (0, 0), (-1, 0), self.brand_color),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONT", (0, 0), (-1, 0), "Helvetica-Bold", 10),
                    ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
                    ("TOPPADDING", (0, 0), (-1, 0), 8),
                    # Data rows
                    ("FONT", (0, 1), (-1, -1), "Helvetica", 9),
                    ("TEXTCOLOR", (0, 1), (-1, -1), self.dark_gray),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -2), [colors.white, self.light_gray]),
                    ("GRID", (0, 0), (-1, -2), 0.5, colors.grey),
                    ("ALIGN", (3, 0), (3, -1), "RIGHT"),
                    # Total row
                    ("FONT", (2, -1), (3, -1), "Helvetica-Bold", 10),
                    ("LINEABOVE", (2, -1), (3, -1), 1, self.dark_gray),
                ]
            )
        )
        story.append(dates_table)

        # Terms (stored already HTML-escaped)
        story.append(Paragraph("TERMS AND CONDITIONS", heading_style))
        for paragraph in contract_terms(contract).split("\n\n"):
            story.append(Paragraph(paragraph, body_style))

        # Signatures
        story.append(Paragraph("SIGNATURES", heading_style))
        signed_on = (
            contract.responded_at.strftime("%B %d, %Y")
            if contract.responded_at and contract.musician_signature
            else ""
        )
        signature_table = Table(
            [
                [f"For {COMPANY_NAME}", "Musician"],
                [
                    Paragraph(escape(contract.company_signature or ""), signature_style),
                    # musician_signature is stored HTML-escaped
                    Paragraph(contract.musician_signature or "", signature_style),
                ],
                ["", signed_on],
            ],
            colWidths=[3.25 * inch, 3.25 * inch],
        )
        signature_table.setStyle(
            TableStyle(
                [
                    ("FONT", (0, 0), (-1, 0), "Helvetica-Bold", 10),
                    ("FONT", (0, 1), (-1, 1), "Helvetica-Oblique", 12),
                    ("FONT", (0, 2), (-1, 2), "Helvetica", 8),
                    ("LINEBELOW", (0, 1), (-1, 1), 0.75, self.dark_gray),
                    ("TOPPADDING", (0, 1), (-1, 1), 18),
                ]
            )
        )
        story.append(signature_table)

        doc.build(story, onFirstPage=self._add_page_number, onLaterPages=self._add_page_number)

        pdf_bytes = buffer.getvalue()
        buffer.close()

        logger.info(f"✅ Generated contract PDF ({len(pdf_bytes)} bytes)")
        return pdf_bytes

    def _add_page_number(self, canvas_obj, doc):
        """Add page numbers to PDF"""
        page_num = canvas_obj.getPageNumber()
        canvas_obj.setFont("Helvetica", 9)
        canvas_obj.setFillColor(colors.grey)
        canvas_obj.drawRightString(self.page_width - self.margin, self.margin / 2, f"Page {page_num}")
