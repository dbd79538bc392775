"""
MJML Email Templates
Musician and admin notifications for contracts and planners
"""

from html import escape
from typing import Optional

from .config import COMPANY_NAME

# Indigo/Slate color scheme
THEME = {
    "primary": "#4f46e5",
    "background": "#f8fafc",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "success": "#16a34a",
    "danger": "#dc2626",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="32px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              {escape(COMPANY_NAME)}
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _dates_table(lines: list[dict]) -> str:
    rows = "".join(
        f"""
        <tr>
          <td style="padding: 6px 0;">{escape(str(line['date']))}</td>
          <td style="padding: 6px 0;">{escape(line.get('venueName') or '')}</td>
          <td style="padding: 6px 0;">{escape(line.get('startTime') or '')}–{escape(line.get('endTime') or '')}</td>
          <td style="padding: 6px 0; text-align: right;">${line['fee']:,.2f}</td>
        </tr>"""
        for line in lines
    )
    return f"""
    <mj-table font-size="14px" color="{THEME['text_secondary']}">
      <tr style="border-bottom: 1px solid {THEME['border']}; text-align: left;">
        <th>Date</th><th>Venue</th><th>Time</th><th style="text-align: right;">Fee</th>
      </tr>
      {rows}
    </mj-table>
    """


def contract_sent_template(
    musician_name: str,
    period_label: str,
    lines: list[dict],
    total: float,
    signing_url: str,
    expires_on: str,
    message: Optional[str] = None,
) -> str:
    """Contract ready for review and signature, sent to the musician"""
    note = ""
    if message:
        note = f"""
        <mj-text padding="0 0 16px 0" color="{THEME['text_muted']}">
          {escape(message)}
        </mj-text>
        """

    content = f"""
    <mj-text>
      Hi {escape(musician_name)},
    </mj-text>

    <mj-text>
      Your performance contract for <strong>{escape(period_label)}</strong> is ready.
      Please review the dates below and sign or decline using the button.
    </mj-text>

    {note}

    {_dates_table(lines)}

    <mj-text font-weight="600" align="right">
      Total: ${total:,.2f}
    </mj-text>

    <mj-text font-size="13px" color="{THEME['text_muted']}">
      This link is personal and can be used once. It expires on {escape(expires_on)}.
    </mj-text>
    """

    return get_base_template(
        title="Your performance contract",
        preview_text=f"Contract for {period_label} awaiting your signature",
        content_sections=content,
        cta_url=signing_url,
        cta_label="Review &amp; Sign",
    )


def contract_response_template(
    musician_name: str,
    period_label: str,
    verdict: str,
    signature: Optional[str] = None,
    notes: Optional[str] = None,
) -> str:
    """Admin notification when a musician signs, partially signs or rejects a contract"""
    color = THEME["danger"] if verdict == "rejected" else THEME["success"]
    verdict = verdict.replace("-", " ")

    details = ""
    if signature:
        details += f"<mj-text>Signature: <strong>{escape(signature)}</strong></mj-text>"
    if notes:
        details += f"<mj-text>Notes: {escape(notes)}</mj-text>"

    content = f"""
    <mj-text color="{color}" font-weight="600">
      Contract {verdict}
    </mj-text>

    <mj-text>
      {escape(musician_name)} has {verdict} the contract for {escape(period_label)}.
    </mj-text>

    {details}
    """

    return get_base_template(
        title=f"Contract {verdict}",
        preview_text=f"{musician_name} {verdict} the {period_label} contract",
        content_sections=content,
    )


def planner_finalized_template(
    musician_name: str, period_label: str, lines: list[dict], total: float
) -> str:
    """Schedule summary sent to each assigned musician when a planner is finalized"""
    content = f"""
    <mj-text>
      Hi {escape(musician_name)},
    </mj-text>

    <mj-text>
      The schedule for <strong>{escape(period_label)}</strong> is final. You are booked for:
    </mj-text>

    {_dates_table(lines)}

    <mj-text font-weight="600" align="right">
      Total: ${total:,.2f}
    </mj-text>

    <mj-text font-size="13px" color="{THEME['text_muted']}">
      A contract for these dates will follow separately.
    </mj-text>
    """

    return get_base_template(
        title=f"Your schedule for {period_label}",
        preview_text=f"{len(lines)} performance(s) booked for {period_label}",
        content_sections=content,
    )
