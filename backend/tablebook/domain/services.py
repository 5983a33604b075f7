import re
from typing import Optional

from ..models import CustomerInfo, ReservationDraft, WizardStep

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


def validate_guest_info(info: CustomerInfo) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not info.name.strip():
        errors["name"] = "Please enter your name"
    if not info.email.strip():
        errors["email"] = "Please enter your email"
    elif not EMAIL_PATTERN.match(info.email):
        errors["email"] = "Please enter a valid email address"
    if not info.phone.strip():
        errors["phone"] = "Please enter your phone number"
    return errors


def validate_step(draft: ReservationDraft, step: Optional[WizardStep] = None) -> dict[str, str]:
    """
    Pure validation of one wizard step, the draft's current one by default.
    Returns a field -> message map; an empty map means the step may be left.
    """
    step = draft.current_step if step is None else step
    errors: dict[str, str] = {}
    if step == WizardStep.DATE_TIME:
        if draft.selected_date is None:
            errors["date"] = "Please select a date"
        if not draft.selected_time:
            errors["time"] = "Please select a time"
        if draft.party_size < 1:
            errors["partySize"] = "Please enter a valid party size"
    elif step == WizardStep.TABLE_SELECT:
        if draft.selected_table is None:
            errors["table"] = "Please select a table"
    elif step == WizardStep.GUEST_INFO:
        errors.update(validate_guest_info(draft.customer_info))
    return errors


def validate_through(draft: ReservationDraft) -> dict[str, str]:
    """Errors of every step up to and including the current one."""
    errors: dict[str, str] = {}
    for step in WizardStep:
        if step > draft.current_step:
            break
        errors.update(validate_step(draft, step))
    return errors
