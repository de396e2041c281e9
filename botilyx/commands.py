# botilyx/commands.py
import click

from botilyx.extensions import db


def register_commands(app):

    @app.cli.command("send-reminders")
    @click.option("--limit", type=int, default=None, help="Maximum reminders to process.")
    def send_reminders(limit):
        """Dispatch every due, unsent reminder."""
        from botilyx.services.notification_dispatcher import process_due_notifications

        summary = process_due_notifications(limit=limit)
        failed = [r for r in summary["results"] if not r["success"]]
        click.echo(f"Processed {summary['processed']} reminders, {len(failed)} failed")

    @app.cli.command("init-db")
    def init_db():
        """Create all tables (development only; use `flask db upgrade` otherwise)."""
        db.create_all()
        click.echo("Database tables created")
