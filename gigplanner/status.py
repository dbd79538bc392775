"""
Status vocabularies and allowed transitions for planners, assignments,
contracts and invoices
"""

PLANNER_STATUSES = ("draft", "finalized")

SLOT_STATUSES = ("open", "assigned", "completed")

ASSIGNMENT_STATUSES = (
    "scheduled",
    "contract-sent",
    "contract-signed",
    "contract-rejected",
    "attended",
    "absent",
)

CONTRACT_STATUSES = (
    "draft",
    "sent",
    "signed",
    "partially-signed",
    "rejected",
    "cancelled",
    "completed",
)

# Contracts that still bind a musician to their dates
OPEN_CONTRACT_STATUSES = ("draft", "sent", "signed", "partially-signed")

# Contracts the musician has agreed to, at least in part
SIGNED_CONTRACT_STATUSES = ("signed", "partially-signed")

# Per-date answers on a contract
CONTRACT_LINE_STATUSES = ("pending", "accepted", "rejected")

INVOICE_STATUSES = ("draft", "finalized", "paid")

ATTENDANCE_STATUSES = ("attended", "absent")

# Entities whose status changes are kept in the status history
HISTORY_ENTITY_TYPES = ("planner", "assignment", "contract", "invoice")

_ASSIGNMENT_TRANSITIONS = {
    "scheduled": ["contract-sent", "attended", "absent"],
    "contract-sent": ["contract-signed", "contract-rejected", "scheduled", "attended", "absent"],
    "contract-signed": ["attended", "absent", "scheduled"],
    "contract-rejected": ["scheduled", "contract-sent"],
    # Attendance can be corrected after the fact
    "attended": ["absent"],
    "absent": ["attended"],
}

_CONTRACT_TRANSITIONS = {
    "draft": ["sent", "cancelled"],
    "sent": ["sent", "signed", "partially-signed", "rejected", "cancelled"],
    "signed": ["completed", "cancelled"],
    "partially-signed": ["completed", "cancelled"],
    "rejected": [],
    "cancelled": [],
    "completed": [],
}

_INVOICE_TRANSITIONS = {
    "draft": ["finalized"],
    "finalized": ["paid"],
    "paid": [],
}

_PLANNER_TRANSITIONS = {
    "draft": ["finalized"],
    "finalized": ["draft"],
}


def _allowed(table: dict, current_status: str, new_status: str) -> bool:
    if current_status == new_status:
        return True
    return new_status in table.get(current_status, [])


def validate_assignment_transition(current_status: str, new_status: str) -> bool:
    """
    Validate an assignment status change

    Assignment statuses: scheduled → contract-sent → contract-signed/contract-rejected,
    then attended/absent once the performance date has passed.
    """
    return _allowed(_ASSIGNMENT_TRANSITIONS, current_status, new_status)


def validate_contract_transition(current_status: str, new_status: str) -> bool:
    """
    Validate a contract status change

    Note:
    - re-sending a sent contract is allowed (it issues a new token)
    - 'completed' is set by status automation once the planner month is over
    - rejected, cancelled and completed are terminal
    """
    return _allowed(_CONTRACT_TRANSITIONS, current_status, new_status)


def validate_invoice_transition(current_status: str, new_status: str) -> bool:
    return _allowed(_INVOICE_TRANSITIONS, current_status, new_status)


def validate_planner_transition(current_status: str, new_status: str) -> bool:
    return _allowed(_PLANNER_TRANSITIONS, current_status, new_status)
