"""Flask CLI commands for operating access links."""

import click

from kaleereads import db
from kaleereads.models import User, Book
from kaleereads.services.access_links import (
    cleanup_expired_links, create_access_link, revoke_access_token
)


def register_commands(app):

    @app.cli.command('init-db')
    def init_db_command():
        """Create missing tables (use `flask db upgrade` once migrations exist)."""
        db.create_all()
        click.echo('Database tables created')

    @app.cli.command('cleanup-access-links')
    def cleanup_access_links_command():
        """Delete access links whose expiry has passed."""
        deleted = cleanup_expired_links()
        click.echo(f'Deleted {deleted} expired access links')

    @app.cli.command('grant-access')
    @click.argument('user_id', type=int)
    @click.argument('book_id', type=int)
    @click.option('--hours', type=float, default=None, help='Lifetime in hours (default: TIME_LIMITED_ACCESS_HOURS).')
    def grant_access_command(user_id, book_id, hours):
        """Create an access link for USER_ID on BOOK_ID."""
        if db.session.get(User, user_id) is None:
            raise click.ClickException(f'User {user_id} not found')
        if db.session.get(Book, book_id) is None:
            raise click.ClickException(f'Book {book_id} not found')
        try:
            link = create_access_link(user_id, book_id, hours)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint='--hours')
        click.echo(f'Token: {link.token}')
        click.echo(f'Expires: {link.expires_at.isoformat()}Z')

    @app.cli.command('revoke-access')
    @click.argument('token')
    def revoke_access_command(token):
        """Revoke an access link."""
        revoke_access_token(token)
        click.echo('Revoked')
