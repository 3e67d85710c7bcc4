#!/usr/bin/env python
"""
Management Script

CLI commands for database management (Flask-Migrate) and offline backups.

Usage:
    # Apply migrations
    python manage.py db upgrade

    # Generate a COOKIE_ENCRYPTION_KEY
    flask --app manage.py generate-key

    # Back up one domain with the saved credential
    flask --app manage.py backup following --filename following-2024.json
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from flask.cli import with_appcontext
import click
from sqlalchemy import inspect, text

from bili_backup import create_app
from bili_backup.errors import BiliError
from bili_backup.extensions import db, session_manager

app = create_app()


@app.cli.command('db-status')
@with_appcontext
def db_status():
    """Show database connection status and table info."""
    try:
        db.session.execute(text('SELECT 1')).fetchone()
        click.echo(click.style('✓ Database connection OK', fg='green'))

        click.echo('\nTables in database:')
        for table in inspect(db.engine).get_table_names():
            click.echo(f'  - {table}')
    except Exception as e:
        click.echo(click.style(f'✗ Database error: {e}', fg='red'))


@app.cli.command('generate-key')
def generate_key():
    """Print a new Fernet key for COOKIE_ENCRYPTION_KEY."""
    from bili_backup.utils.crypto import CookieCrypto
    click.echo(CookieCrypto.generate_key())


@app.cli.command('backup')
@click.argument('domain')
@click.option('--filename', default=None, help='Archive file name, defaults to <domain>.json')
@with_appcontext
def backup(domain, filename):
    """Back up DOMAIN using the saved credential and write it to the archive."""
    from bili_backup.models import StoredCredential
    from bili_backup.services.backup_service import BackupService

    record = StoredCredential.get_active()
    if not record:
        raise click.ClickException('No saved credential, log in through the API first')

    try:
        user = session_manager.login_with_cookie(record.get_cookie_str())
        click.echo(f"Logged in as {user.get('uname')} ({user.get('mid')})")
        result = BackupService.export(domain, None, filename)
    except BiliError as e:
        raise click.ClickException(str(e))

    click.echo(click.style(f"✓ {result['count']} items -> {result['path']}", fg='green'))


@app.cli.command('archives')
@with_appcontext
def archives():
    """List archive files."""
    from bili_backup.services.backup_service import BackupService
    for entry in BackupService.list_archives():
        click.echo(f"{entry['name']:<32} {entry['size']:>10}  {entry['modified']}")


if __name__ == '__main__':
    import subprocess

    if len(sys.argv) > 1 and sys.argv[1] == 'db':
        os.environ['FLASK_APP'] = 'manage.py'
        subprocess.run(['flask'] + sys.argv[1:])
    else:
        app.cli()
