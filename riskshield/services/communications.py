"""Deficiency and confirmation notices, and the dispatcher they are handed to.

Notice bodies use ``{{variable}}`` placeholders so a company template can
replace the default text without changing the variables supplied.
"""

from __future__ import annotations

import logging
import re
from datetime import date, timedelta
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from riskshield.core.config import settings
from riskshield.repositories.communication import CommunicationRepository
from riskshield.schemas.compliance import CommunicationRequest
from riskshield.schemas.verification import Deficiency
from riskshield.services.formatting import format_long_date

logger = logging.getLogger(__name__)

DEFICIENCY_SUBJECT = "Certificate of Currency Deficiency Notice - {{subcontractor_name}} / {{project_name}}"
DEFICIENCY_BODY = """Dear {{recipient_name}},

We have identified deficiencies in the Certificate of Currency submitted for {{subcontractor_name}} (ABN: {{subcontractor_abn}}) on the {{project_name}} project.

DEFICIENCIES FOUND:

{{deficiency_list}}

ACTION REQUIRED:
Please provide an updated Certificate of Currency that addresses the above deficiencies by {{due_date}}.

You can upload the updated certificate directly using this secure link:
{{upload_link}}

If you have any questions, please contact our project team.

Best regards,
{{signature}}"""

CONFIRMATION_SUBJECT = "Insurance Compliance Confirmed - {{subcontractor_name}} / {{project_name}}"
CONFIRMATION_BODY = """Dear {{recipient_name}},

The Certificate of Currency submitted for {{subcontractor_name}} (ABN: {{subcontractor_abn}}) has been verified and meets all requirements for the {{project_name}} project.

VERIFICATION RESULT: APPROVED

{{subcontractor_name}} is now approved to work on the {{project_name}} project. All insurance coverage requirements have been met.

Best regards,
{{signature}}"""

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def render_template(template: str, variables: dict[str, str]) -> str:
    """Substitute ``{{name}}`` placeholders; unknown names are left as-is."""
    return _PLACEHOLDER.sub(lambda m: variables.get(m.group(1), m.group(0)), template)


def format_deficiency_list(deficiencies: list[Deficiency]) -> str:
    return "\n\n".join(
        f"• {d.description}\n"
        f"  Severity: {d.severity.upper()}\n"
        f"  Required: {d.required_value or 'N/A'}\n"
        f"  Actual: {d.actual_value or 'N/A'}"
        for d in deficiencies
    )


def upload_link(project_id: str, subcontractor_id: str) -> str:
    return f"{settings.portal_upload_url}?subcontractor={subcontractor_id}&project={project_id}"


def build_deficiency_notice(
    *,
    recipient_email: str,
    recipient_name: str,
    subcontractor_name: str,
    subcontractor_abn: str | None,
    project_name: str,
    project_id: str,
    subcontractor_id: str,
    deficiencies: list[Deficiency],
    today: date,
    due_days: int | None = None,
) -> CommunicationRequest:
    due_date = today + timedelta(days=settings.deficiency_due_days if due_days is None else due_days)
    variables = {
        "recipient_name": recipient_name,
        "subcontractor_name": subcontractor_name,
        "subcontractor_abn": subcontractor_abn or "N/A",
        "project_name": project_name,
        "deficiency_list": format_deficiency_list(deficiencies),
        "upload_link": upload_link(project_id, subcontractor_id),
        "due_date": format_long_date(due_date),
        "signature": settings.compliance_team_signature,
    }
    return CommunicationRequest(
        type="deficiency",
        recipient_email=recipient_email,
        recipient_name=recipient_name,
        subject=render_template(DEFICIENCY_SUBJECT, variables),
        body=render_template(DEFICIENCY_BODY, variables),
        due_date=due_date,
    )


def build_confirmation_notice(
    *,
    recipient_email: str,
    recipient_name: str,
    subcontractor_name: str,
    subcontractor_abn: str | None,
    project_name: str,
) -> CommunicationRequest:
    variables = {
        "recipient_name": recipient_name,
        "subcontractor_name": subcontractor_name,
        "subcontractor_abn": subcontractor_abn or "N/A",
        "project_name": project_name,
        "signature": settings.compliance_team_signature,
    }
    return CommunicationRequest(
        type="confirmation",
        recipient_email=recipient_email,
        recipient_name=recipient_name,
        subject=render_template(CONFIRMATION_SUBJECT, variables),
        body=render_template(CONFIRMATION_BODY, variables),
    )


class CommunicationDispatcher(Protocol):
    async def dispatch(
        self,
        request: CommunicationRequest,
        *,
        project_id: str,
        subcontractor_id: str,
        verification_id: str | None = None,
    ) -> None: ...


class QueuedCommunicationDispatcher:
    """Queues notices in the ``communications`` table for the email worker."""

    def __init__(self, session: AsyncSession, client_id: str):
        self._repo = CommunicationRepository(session, client_id)

    async def dispatch(
        self,
        request: CommunicationRequest,
        *,
        project_id: str,
        subcontractor_id: str,
        verification_id: str | None = None,
    ) -> None:
        communication = await self._repo.create(
            subcontractor_id=subcontractor_id,
            project_id=project_id,
            verification_id=verification_id,
            type=request.type,
            channel="email",
            recipient_email=request.recipient_email,
            subject=request.subject,
            body=request.body,
            due_date=request.due_date,
            status="queued",
        )
        logger.info(
            "Queued %s notice %s to %s", request.type, communication.id, request.recipient_email,
        )
