"""
Lead pipeline rules.

Stages run new -> contacted -> qualified -> site-visit -> negotiation -> won|lost,
but any stage may be set from any other; the only hard rule is that a lead's
status is always one of the seven stages.
"""
import re
from typing import Optional

from estate_crm.core.errors import ValidationError
from estate_crm.models.lead import LEAD_STATUSES, NAME_MAX_LENGTH

PIPELINE_STAGES = LEAD_STATUSES
CLOSED_STAGES = ("won", "lost")

# Pakistani mobile: 03XXXXXXXXX or +923XXXXXXXXX
MOBILE_PATTERN = re.compile(r"(\+92|0)3[0-9]{9}")
_MOBILE_SEPARATORS = re.compile(r"[\s-]")


def normalize_mobile(raw: Optional[str]) -> str:
    """Strip spaces and dashes, then check the Pakistani mobile format."""
    mobile = _MOBILE_SEPARATORS.sub("", raw or "")
    if not mobile:
        raise ValidationError("Mobile number is required")
    if not MOBILE_PATTERN.fullmatch(mobile):
        raise ValidationError(
            "Enter a valid Pakistani mobile number, e.g. 0300-1234567 or +92 300 1234567"
        )
    return mobile


def is_valid_mobile(raw: Optional[str]) -> bool:
    try:
        normalize_mobile(raw)
    except ValidationError:
        return False
    return True


def require_name(raw: Optional[str]) -> str:
    name = (raw or "").strip()
    if not name:
        raise ValidationError("Name is required")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(f"Name must be at most {NAME_MAX_LENGTH} characters")
    return name


def is_valid_name(raw: Optional[str]) -> bool:
    try:
        require_name(raw)
    except ValidationError:
        return False
    return True


def validate_status(status: Optional[str]) -> str:
    if status not in PIPELINE_STAGES:
        raise ValidationError(
            f"Invalid status '{status}'. Expected one of: {', '.join(PIPELINE_STAGES)}"
        )
    return status


def validate_budget(budget_min: Optional[int], budget_max: Optional[int]) -> None:
    if budget_min is not None and budget_max is not None and budget_min > budget_max:
        raise ValidationError("budget_min cannot be greater than budget_max")


def pipeline_counts(counts: dict[str, int]) -> list[dict]:
    """Per-stage counts in stage order, zero-filled."""
    return [{"stage": stage, "count": counts.get(stage, 0)} for stage in PIPELINE_STAGES]
