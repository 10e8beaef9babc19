"""Linear status progression: draft -> pending -> completed -> reconciled."""

from dataclasses import dataclass
from typing import Optional, Sequence

from ledgerkit.domain.documents import DocumentGateStatus
from ledgerkit.domain.entities import LedgerSettings, TransactionStatus

STATUS_ORDER = (
    TransactionStatus.DRAFT,
    TransactionStatus.PENDING,
    TransactionStatus.COMPLETED,
    TransactionStatus.RECONCILED,
)

AUTO_PROMOTION_NOTE = "Automatic status change"
AUTO_PROMOTION_BLOCKED_MESSAGE = (
    "Drafts are promoted to pending automatically once they are complete; "
    "add a payee (and both accounts in double-entry mode) instead of advancing manually."
)


@dataclass(frozen=True)
class ProgressionCheck:
    """Result of evaluating the progression gates for one advance."""

    allowed: bool
    next_status: Optional[TransactionStatus]
    blocked_reason: Optional[str] = None
    missing: Optional[int] = None


def can_advance(status: TransactionStatus) -> bool:
    """Return True for every status except the terminal reconciled status."""
    return TransactionStatus(status) != TransactionStatus.RECONCILED


def next_status(status: TransactionStatus) -> Optional[TransactionStatus]:
    """Return the status after this one, or None for reconciled."""
    index = STATUS_ORDER.index(TransactionStatus(status))
    if index + 1 >= len(STATUS_ORDER):
        return None
    return STATUS_ORDER[index + 1]


def check_progression(
    current: TransactionStatus,
    gate: Optional[DocumentGateStatus],
    settings: LedgerSettings,
    unmet_conditions: Sequence[str] = (),
) -> ProgressionCheck:
    """Evaluate the policy gates for advancing from the current status.

    Args:
        current: Stored status
        gate: Document gate status of the transaction (only read when the
            target is reconciled)
        settings: Owner ledger settings
        unmet_conditions: Reconciliation conditions not met by the transaction

    Returns:
        ProgressionCheck describing whether the advance may proceed
    """
    target = next_status(current)
    if target is None:
        return ProgressionCheck(
            allowed=False,
            next_status=None,
            blocked_reason="Reconciled transactions cannot be advanced further.",
        )

    if settings.auto_draft_to_pending and current == TransactionStatus.DRAFT:
        return ProgressionCheck(
            allowed=False, next_status=target, blocked_reason=AUTO_PROMOTION_BLOCKED_MESSAGE
        )

    if target == TransactionStatus.RECONCILED:
        if gate is not None and not gate.has_all_required_documents:
            return ProgressionCheck(
                allowed=False,
                next_status=target,
                blocked_reason=gate.requirement_message(),
                missing=gate.missing_count,
            )
        if unmet_conditions:
            return ProgressionCheck(
                allowed=False,
                next_status=target,
                blocked_reason=(
                    "Cannot reconcile. Unmet reconciliation conditions: "
                    f"{', '.join(unmet_conditions)}."
                ),
                missing=len(unmet_conditions),
            )

    return ProgressionCheck(allowed=True, next_status=target)


def should_auto_promote(
    status: TransactionStatus,
    has_payee: bool,
    credit_account_id: Optional[int],
    debit_account_id: Optional[int],
    settings: LedgerSettings,
    account_id: Optional[int] = None,
) -> bool:
    """Return True when a draft should be stored as pending instead.

    Applies only with auto_draft_to_pending enabled: the draft needs a payee,
    and both a credit and a debit account in double-entry mode. Outside
    double-entry mode a single account is enough.
    """
    if not settings.auto_draft_to_pending or status != TransactionStatus.DRAFT:
        return False
    if not has_payee:
        return False
    has_pair = credit_account_id is not None and debit_account_id is not None
    if settings.double_entry_mode:
        return has_pair
    return has_pair or account_id is not None
