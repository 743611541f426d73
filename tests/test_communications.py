"""Tests for notice rendering."""

from datetime import date

from riskshield.core.config import settings
from riskshield.services.communications import (
    build_confirmation_notice,
    build_deficiency_notice,
    format_deficiency_list,
    render_template,
)
from riskshield.services.formatting import make_deficiency
from tests.factories import TODAY

DEFICIENCIES = [
    make_deficiency(
        "insufficient_limit",
        "Public Liability limit is below minimum requirement",
        required_value="$20,000,000",
        actual_value="$10,000,000",
    ),
    make_deficiency("missing_endorsement", "Cross liability extension required", "Yes", None),
]


def test_render_template_leaves_unknown_placeholders():
    assert render_template("Hi {{name}}, {{other}}", {"name": "Sam"}) == "Hi Sam, {{other}}"


def test_format_deficiency_list():
    text = format_deficiency_list(DEFICIENCIES)
    assert text == (
        "• Public Liability limit is below minimum requirement\n"
        "  Severity: MAJOR\n"
        "  Required: $20,000,000\n"
        "  Actual: $10,000,000\n"
        "\n"
        "• Cross liability extension required\n"
        "  Severity: MAJOR\n"
        "  Required: Yes\n"
        "  Actual: N/A"
    )


class TestDeficiencyNotice:
    def _notice(self, **overrides):
        kwargs = dict(
            recipient_email="jordan@broker.example",
            recipient_name="Jordan Broker",
            subcontractor_name="Apex Electrical",
            subcontractor_abn="51 824 753 556",
            project_name="Harbour Tower",
            project_id="p-1",
            subcontractor_id="s-1",
            deficiencies=DEFICIENCIES,
            today=TODAY,
        )
        kwargs.update(overrides)
        return build_deficiency_notice(**kwargs)

    def test_due_in_fourteen_days_by_default(self):
        notice = self._notice()
        assert notice.due_date == date(2026, 3, 15)
        assert "by 15 March 2026" in notice.body

    def test_custom_due_days(self):
        assert self._notice(due_days=7).due_date == date(2026, 3, 8)

    def test_subject_and_body(self):
        notice = self._notice()
        assert notice.type == "deficiency"
        assert notice.subject == (
            "Certificate of Currency Deficiency Notice - Apex Electrical / Harbour Tower"
        )
        assert notice.body.startswith("Dear Jordan Broker,")
        assert "(ABN: 51 824 753 556)" in notice.body
        assert f"{settings.portal_upload_url}?subcontractor=s-1&project=p-1" in notice.body
        assert "{{" not in notice.body

    def test_missing_abn_shows_na(self):
        assert "(ABN: N/A)" in self._notice(subcontractor_abn=None).body


def test_confirmation_notice():
    notice = build_confirmation_notice(
        recipient_email="sam@apex.example",
        recipient_name="Sam Lee",
        subcontractor_name="Apex Electrical",
        subcontractor_abn=None,
        project_name="Harbour Tower",
    )
    assert notice.type == "confirmation"
    assert notice.due_date is None
    assert notice.subject == "Insurance Compliance Confirmed - Apex Electrical / Harbour Tower"
    assert "VERIFICATION RESULT: APPROVED" in notice.body
    assert notice.body.endswith(settings.compliance_team_signature)
