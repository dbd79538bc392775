"""Contract text rendering (Markdown), shared by the admin preview and the signing page"""

import html
import re

from ...config import COMPANY_NAME
from ...models import Contract
from ...shared.dates import period_label

DEFAULT_TERMS = [
    "This agreement is a binding contract between {company} and the musician named "
    "above for the performance dates listed.",
    "Venue details, call times and attire requirements will be provided separately "
    "for each engagement.",
    "The musician is expected to arrive prepared and on time for every performance. "
    "Any unavoidable conflict must be communicated as soon as possible.",
    "Payment will be made at the agreed fee for each performance date, typically "
    "within 14 days of the performance.",
]

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def default_terms() -> str:
    return "\n\n".join(term.format(company=COMPANY_NAME) for term in DEFAULT_TERMS)


def contract_period(contract: Contract) -> str:
    planner = contract.planner
    return period_label(planner.month, planner.year) if planner else "Unknown period"


def placeholder_values(contract: Contract) -> dict[str, str]:
    return {
        "musician_name": contract.musician.name if contract.musician else "",
        "period": contract_period(contract),
        "total": f"${(contract.amount or 0):,.2f}",
        "company": COMPANY_NAME,
        "contract_id": str(contract.id or ""),
    }


def fill_placeholders(text: str, values: dict[str, str]) -> str:
    """
    Replace {{name}} markers with escaped values.
    Unknown markers are left as written.
    """

    def replace(match: re.Match) -> str:
        key = match.group(1)
        if key not in values:
            return match.group(0)
        return html.escape(values[key], quote=True)

    return _PLACEHOLDER.sub(replace, text)


def contract_terms(contract: Contract) -> str:
    return fill_placeholders(contract.terms or default_terms(), placeholder_values(contract))


def render_contract_markdown(contract: Contract) -> str:
    musician_name = contract.musician.name if contract.musician else "Unknown musician"

    parts = [
        f"# {COMPANY_NAME}",
        "## Monthly Musician Agreement",
        f"Contract #{contract.id}",
        "",
        f"**Musician:** {musician_name}  ",
        f"**Period:** {contract_period(contract)}  ",
        f"**Status:** {contract.status.replace('-', ' ').capitalize()}",
        "",
        "## Performance Dates",
        "",
    ]

    if contract.lines:
        parts.append("| Date | Venue | Time | Fee | Response |")
        parts.append("|---|---|---|---:|---|")
        for line in contract.lines:
            time_range = f"{line.start_time or '--'}–{line.end_time or '--'}"
            parts.append(
                f"| {line.date.strftime('%a %d %b %Y')} | {line.venue_name or ''} "
                f"| {time_range} | ${line.fee:,.2f} | {(line.status or 'pending').capitalize()} |"
            )
    else:
        parts.append("No performance dates are covered by this contract.")

    parts += [
        "",
        f"**Total fee:** ${contract.amount:,.2f}",
        "",
        "## Terms and Conditions",
        "",
        contract_terms(contract),
        "",
        "## Signatures",
        "",
        f"For {COMPANY_NAME}: {contract.company_signature or '________________'}",
        "",
        f"Musician: {contract.musician_signature or '________________'}",
    ]
    if contract.responded_at and contract.musician_signature:
        parts.append(f"Signed on {contract.responded_at.strftime('%B %d, %Y')}")

    return "\n".join(parts)
