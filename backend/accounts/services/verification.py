from __future__ import annotations

from accounts.models import User

# Identity session outcome -> verification status. Every outcome Stripe reports
# has an explicit target so both webhook endpoints behave the same way.
OUTCOME_TRANSITIONS = {
    "verified": User.VERIFICATION_VERIFIED,
    "requires_input": User.VERIFICATION_REQUIRES_INPUT,
    "canceled": User.VERIFICATION_UNVERIFIED,
    "processing": User.VERIFICATION_PENDING,
}


def apply_verification_outcome(user: User, outcome: str, *, session_id: str = "") -> bool:
    """
    Move the user's identity status to the state matching `outcome`.

    Returns False when the outcome is unknown (nothing is changed).
    A user already VERIFIED keeps that status; later sessions cannot downgrade it.
    """
    target = OUTCOME_TRANSITIONS.get(outcome)
    if target is None:
        return False
    if user.verification_status == User.VERIFICATION_VERIFIED:
        return target == User.VERIFICATION_VERIFIED

    if target == User.VERIFICATION_VERIFIED:
        user.mark_verified(session_id=session_id)
        return True

    user.verification_status = target
    user.is_verified = False
    if session_id:
        user.identity_session_id = session_id
    user.save(update_fields=["verification_status", "is_verified", "identity_session_id"])
    return True
