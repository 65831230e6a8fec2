"""CLI entry point for the consistency core."""

from __future__ import annotations

import click

from .core.errors import ConfigError


@click.group()
def main() -> None:
    """Credit line / billing cycle consistency core."""


@main.command()
@click.option("--config", default=None, help="Config file path")
@click.option("--limit", "limit_amount", default="100", help="Limit to assign")
@click.option("--withdraw", "withdraw_amount", default="0", help="Amount withdrawn before closing")
@click.option("--currency", default=None, help="Currency override")
@click.option("--metrics", is_flag=True, help="Serve Prometheus metrics on the configured port")
def simulate(
    config: str | None,
    limit_amount: str,
    withdraw_amount: str,
    currency: str | None,
    metrics: bool,
) -> None:
    """Run one card through a full billing cycle and print the outcome."""
    from .bootstrap import build_context
    from .core.config import load_settings
    from .core.money import Money
    from .domain.ids import OwnerId
    from .observability import metrics as prom
    from .observability.logger import new_trace_id, setup_logging

    try:
        settings = load_settings(config)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    setup_logging(settings.observability.log_level, settings.observability.log_format)
    new_trace_id()

    if metrics:
        port = settings.observability.metrics_port
        prom.start_metrics_server(port)
        click.echo(f"metrics:         http://localhost:{port}/metrics")

    ctx = build_context(settings)
    currency = (currency or settings.policy.default_currency).upper()
    owner = OwnerId.random()

    card_id = ctx.credit_line_service.create_card(currency)
    ctx.ownership_service.add_access(card_id, owner)
    limit_result = ctx.credit_line_service.assign_limit(
        card_id, Money.of(limit_amount, currency)
    )
    open_result = ctx.credit_line_service.open_next_cycle(card_id)
    cycle_id = ctx.credit_line_service.current_open_cycle(card_id)
    if cycle_id is None:
        raise click.ClickException(
            f"Could not open a billing cycle (assign_limit={limit_result.value}, "
            f"open_next_cycle={open_result.value})"
        )

    withdraw_result = ctx.billing_cycle_service.withdraw(
        cycle_id, Money.of(withdraw_amount, currency), owner
    )
    close_result = ctx.billing_cycle_service.close(cycle_id)

    card = ctx.credit_lines.find(card_id)
    click.echo(f"card:            {card_id}")
    click.echo(f"billing cycle:   {cycle_id}")
    click.echo(f"withdraw:        {withdraw_result.value}")
    click.echo(f"close:           {close_result.value}")
    click.echo(f"debt:            {card.debt}")
    click.echo(f"active:          {card.is_active}")
    click.echo(f"card version:    {ctx.store.stream_version(card_id.stream_id())}")
    click.echo(f"cycle version:   {ctx.store.stream_version(cycle_id.stream_id())}")


if __name__ == "__main__":
    main()
