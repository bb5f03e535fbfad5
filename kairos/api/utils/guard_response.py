from dataclasses import asdict

from fastapi import status
from fastapi.responses import JSONResponse, RedirectResponse

from kairos.client.route_guard import GuardDecision, GuardOutcome


def render_guard_decision(decision: GuardDecision):
    """
    HTTP rendering of a non-admitted guard decision.

    Checking renders the waiting view (202); denied redirects with 303 so the
    browser replaces the protected URL with the public route.
    """
    if decision.outcome == GuardOutcome.checking:
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED,
            content={
                "status": decision.outcome.value,
                "waiting": asdict(decision.waiting),
            },
        )
    return RedirectResponse(
        url=decision.redirect_to, status_code=status.HTTP_303_SEE_OTHER
    )
