import click

from .extensions import db
from .services.tokens import generate_tokens, purge_expired_tokens


def register_cli(app):
    @app.cli.command("purge-expired-tokens")
    def purge_expired_tokens_command():
        """Delete unused registration tokens past their expiry."""
        deleted = purge_expired_tokens(db.session)
        click.echo(f"Deleted {deleted} expired token(s).")

    @app.cli.command("generate-tokens")
    @click.option("--type", "user_type", type=click.Choice(["basic", "premium"]), default="basic")
    @click.option("--quantity", type=click.IntRange(1, 100), default=1)
    def generate_tokens_command(user_type, quantity):
        """Issue registration tokens without going through the admin API."""
        for token in generate_tokens(db.session, user_type, quantity):
            click.echo(f"{token.code}\t{token.user_type}\t{token.price}")
