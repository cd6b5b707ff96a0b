# SPDX-License-Identifier: Apache-2.0
"""Click CLI entry point. Install the project, then run ukcas --help."""
import click

from .client import UkcasClient
from .exceptions import UkcasClientError


@click.group()
@click.option("--api-url", default="http://localhost:8000", envvar="UKCAS_API_URL", help="API base URL")
@click.option("--token", default=None, envvar="UKCAS_TOKEN", help="Bearer token")
@click.option("--institute", "institute_id", default=None, envvar="UKCAS_INSTITUTE_ID", help="Active institute ID")
@click.option("--account-type", default=None, envvar="UKCAS_ACCOUNT_TYPE", help="Account type, e.g. admin")
@click.pass_context
def cli(ctx, api_url, token, institute_id, account_type):
    """UKCAS certificates: issue, approve and verify."""
    ctx.ensure_object(dict)
    ctx.obj["client"] = UkcasClient(api_url, token=token, institute_id=institute_id, account_type=account_type)


def _client(ctx) -> UkcasClient:
    return ctx.obj["client"]


def _fail(e: UkcasClientError):
    raise click.ClickException(str(e))


@cli.command()
@click.argument("certificate_id")
@click.pass_context
def verify(ctx, certificate_id):
    """Verify a certificate by ID (no login needed)."""
    try:
        data = _client(ctx).verify(certificate_id)
    except UkcasClientError as e:
        _fail(e)
    cert, institute, course = data["certificate"], data["institute"], data["course"]
    click.echo(f"Certificate {cert['certificate_id']}: {cert['status']}")
    click.echo(f"  Institute: {institute.get('name', '')}")
    click.echo(f"  Course:    {course.get('course_name', '')}")
    click.echo(f"  Valid:     {cert['valid_from']} to {cert['valid_to']}")


@cli.command()
@click.option("--student", "student_id", required=True)
@click.option("--course", "course_id", required=True)
@click.pass_context
def check(ctx, student_id, course_id):
    """Check whether a certificate already exists for a student and course."""
    try:
        result = _client(ctx).check_existing(student_id, course_id)
    except UkcasClientError as e:
        _fail(e)
    if result.get("exists"):
        click.echo(f"{result['certificate_id']} ({result['status']}): {result['message']}")
    else:
        click.echo("No existing certificate.")


@cli.command()
@click.option("--student", "student_id", required=True)
@click.option("--course", "course_id", required=True)
@click.option("--issue-date", required=True, type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option("--valid-from", required=True, type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option("--valid-to", required=True, type=click.DateTime(formats=["%Y-%m-%d"]))
@click.pass_context
def issue(ctx, student_id, course_id, issue_date, valid_from, valid_to):
    """Submit a certificate for admin approval."""
    try:
        cert = _client(ctx).issue_certificate(
            student_id, course_id, issue_date.date(), valid_from.date(), valid_to.date()
        )
    except UkcasClientError as e:
        _fail(e)
    click.echo(f"Submitted {cert['certificate_id']} ({cert['status']})")


@cli.command()
@click.argument("certificate_id")
@click.pass_context
def approve(ctx, certificate_id):
    """Approve a Pending certificate."""
    try:
        click.echo(_client(ctx).approve(certificate_id))
    except UkcasClientError as e:
        _fail(e)


@cli.command()
@click.argument("certificate_id")
@click.pass_context
def reject(ctx, certificate_id):
    """Reject a Pending certificate."""
    try:
        click.echo(_client(ctx).reject(certificate_id))
    except UkcasClientError as e:
        _fail(e)


@cli.command()
@click.argument("institute_id")
@click.pass_context
def balance(ctx, institute_id):
    """Show an institute's balance."""
    try:
        click.echo(f"{_client(ctx).get_balance(institute_id):.2f}")
    except UkcasClientError as e:
        _fail(e)


@cli.command("top-up")
@click.argument("institute_id")
@click.argument("amount")
@click.pass_context
def top_up(ctx, institute_id, amount):
    """Add credit to an institute's balance."""
    try:
        new_balance = _client(ctx).top_up(institute_id, amount)
    except UkcasClientError as e:
        _fail(e)
    click.echo(f"Balance: {new_balance:.2f}")


@cli.command("add-institute")
@click.argument("name")
@click.option("--id", "institute_id", default=None, help="Institute ID (generated when omitted)")
@click.option("--country", default="")
@click.pass_context
def add_institute(ctx, name, institute_id, country):
    """Register an institute (administrators only)."""
    try:
        institute = _client(ctx).add_institute(name, institute_id, country=country)
    except UkcasClientError as e:
        _fail(e)
    click.echo(f"Registered institute {institute['id']}: {institute['name']}")


@cli.command("add-student")
@click.argument("name")
@click.option("--email", "email_address", default="")
@click.option("--for-institute", "institute_id", default=None, help="Owning institute (admins only)")
@click.pass_context
def add_student(ctx, name, email_address, institute_id):
    """Register a student with the active institute."""
    try:
        student = _client(ctx).add_student(name, institute_id, email_address=email_address)
    except UkcasClientError as e:
        _fail(e)
    click.echo(f"Registered student {student['id']}: {student['name']}")


@cli.command("add-course")
@click.argument("course_name")
@click.option("--code", "course_code", default=None)
@click.option("--for-institute", "institute_id", default=None, help="Owning institute (admins only)")
@click.pass_context
def add_course(ctx, course_name, course_code, institute_id):
    """Register a course offered by the active institute."""
    fields = {"course_code": course_code} if course_code else {}
    try:
        course = _client(ctx).add_course(course_name, institute_id, **fields)
    except UkcasClientError as e:
        _fail(e)
    click.echo(f"Registered course {course['id']}: {course['course_name']}")


def main():
    """Entry point for console_scripts."""
    cli(obj={})


if __name__ == "__main__":
    main()
