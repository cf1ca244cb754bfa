import click

from app.services import StatementService
from app.services.parsing import parse_month


def register_commands(app):
    @app.cli.command("generate-statements")
    @click.option("--period", help="Month to generate as YYYY-MM; defaults to the previous month.")
    def generate_statements(period):
        """Generate owner statements for every property."""
        start, end = parse_month(period) if period else StatementService.previous_month()
        results = StatementService.generate_all_for_period(start, end)
        for result in results:
            click.echo(f"property {result['property_id']}: {result['status']} ({result['message']})")
        created = sum(1 for result in results if result["status"] == "created")
        click.echo(f"{created} created, {len(results) - created} not created for {start}..{end}")
