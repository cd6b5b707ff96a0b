# SPDX-License-Identifier: Apache-2.0
from click.testing import CliRunner

from ukcas_client import UkcasClient, cli as cli_module


def _run(monkeypatch, session, *args):
    monkeypatch.setattr(
        cli_module,
        "UkcasClient",
        lambda api_url, token=None, institute_id=None, account_type=None: UkcasClient(
            api_url, token, institute_id, account_type, session=session
        ),
    )
    return CliRunner().invoke(cli_module.cli, list(args), obj={})


def test_verify(monkeypatch, session):
    session.queue(
        body={
            "status": "success",
            "verified": True,
            "data": {
                "certificate": {
                    "certificate_id": "UKCAS-12345678",
                    "status": "Approved",
                    "valid_from": "2024-06-01",
                    "valid_to": "2027-05-31",
                },
                "institute": {"name": "Northbridge College"},
                "course": {"course_name": "Diploma in Data Analytics"},
            },
        }
    )
    result = _run(monkeypatch, session, "verify", "UKCAS-12345678")
    assert result.exit_code == 0
    assert "UKCAS-12345678: Approved" in result.output
    assert "Northbridge College" in result.output


def test_verify_failure_exits_nonzero(monkeypatch, session):
    session.queue(404, {"status": "error", "verified": False, "error": "certificate_not_found", "message": "Not found."})
    result = _run(monkeypatch, session, "verify", "UKCAS-0")
    assert result.exit_code == 1
    assert "Not found." in result.output


def test_issue_passes_token_and_institute(monkeypatch, session):
    session.queue(201, {"status": "success", "data": {"certificate_id": "UKCAS-1", "status": "Pending"}})
    result = _run(
        monkeypatch,
        session,
        "--token",
        "tok",
        "--institute",
        "inst-1",
        "issue",
        "--student",
        "stu-1",
        "--course",
        "course-1",
        "--issue-date",
        "2024-06-01",
        "--valid-from",
        "2024-06-01",
        "--valid-to",
        "2027-05-31",
    )
    assert result.exit_code == 0, result.output
    assert "Submitted UKCAS-1 (Pending)" in result.output
    call = session.calls[0]
    assert call["headers"]["X-Institute-Id"] == "inst-1"
    assert call["json"]["valid_to"] == "2027-05-31"


def test_top_up(monkeypatch, session):
    session.queue(body={"status": "success", "data": {"institute_id": "inst-1", "balance": 110.0}})
    result = _run(monkeypatch, session, "--token", "admin", "top-up", "inst-1", "10")
    assert result.exit_code == 0
    assert "Balance: 110.00" in result.output


def test_check_reports_existing(monkeypatch, session):
    session.queue(body={"exists": True, "certificate_id": "UKCAS-1", "status": "Rejected", "message": "already Rejected"})
    result = _run(monkeypatch, session, "--token", "t", "check", "--student", "stu-1", "--course", "course-1")
    assert "UKCAS-1 (Rejected)" in result.output


def test_add_student_uses_active_institute(monkeypatch, session):
    session.queue(201, {"status": "success", "data": {"id": "stu-7", "name": "Isla Moore", "institute_id": "inst-1"}})
    result = _run(
        monkeypatch, session, "--token", "t", "--institute", "inst-1", "add-student", "Isla Moore", "--email", "isla@example.com"
    )
    assert result.exit_code == 0, result.output
    assert "Registered student stu-7: Isla Moore" in result.output
    call = session.calls[0]
    assert call["url"].endswith("/students")
    assert call["json"] == {"name": "Isla Moore", "email_address": "isla@example.com"}


def test_add_institute_as_admin(monkeypatch, session):
    session.queue(201, {"status": "success", "data": {"id": "inst-3", "name": "Eastfield Institute"}})
    result = _run(
        monkeypatch, session, "--token", "t", "--account-type", "admin", "add-institute", "Eastfield Institute", "--id", "inst-3"
    )
    assert result.exit_code == 0, result.output
    assert "Registered institute inst-3" in result.output
    assert session.calls[0]["headers"]["X-Account-Type"] == "admin"
    assert session.calls[0]["json"]["id"] == "inst-3"


def test_approve_refused_for_staff(monkeypatch, session):
    session.queue(403, {"status": "error", "error": "forbidden", "message": "Only UKCAS administrators may do this."})
    result = _run(monkeypatch, session, "--token", "t", "approve", "UKCAS-1")
    assert result.exit_code == 1
    assert "Only UKCAS administrators" in result.output
