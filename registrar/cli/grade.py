"""CLI commands for inspecting grades and their audit trail."""

from __future__ import annotations

from sqlalchemy.orm import Session

import registrar.lib.cli as click
from registrar.core import di
from registrar.grading import snapshot
from registrar.model import GradeID
from registrar.storage import grade as grade_storage
from registrar.storage import history as history_storage


@click.group("grade")
def grade():
    """Inspect grades."""
    ...


@grade.command("history")
@click.argument("grade_id", type=click.KeyType(GradeID))
@di.inject
def grade_history(grade_id: GradeID, session: Session = di.Provide["storage.persistent.session"]) -> None:
    """Print the audit trail of a grade, oldest edit first.

    Entries of deleted grades are still shown.
    """
    with session.begin():
        current = grade_storage.get(grade_id, session=session)
        entries = sorted(history_storage.find(grade_id=grade_id, session=session), key=lambda e: e.edit_number)

    if current is None:
        click.echo(click.style(f"{grade_id} no longer exists", fg="yellow"))
    else:
        click.echo(f"{grade_id}  {current.score:g}  {current.semester}  {current.status.value}")

    if not entries:
        click.echo("no edits recorded")
        return

    for entry in entries:
        before = snapshot.decode(entry.old_values)
        after = snapshot.decode(entry.new_values)
        changes = "; ".join(snapshot.describe_changes(before, after)) or "no content change"
        click.echo(f"#{entry.edit_number}  {entry.create_time:%Y-%m-%d %H:%M}  {entry.editor_id}  {changes}")
        click.echo(f"    reason: {entry.reason}")
