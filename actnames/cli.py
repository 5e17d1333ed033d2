import asyncio

import click
import httpx
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from actnames.config import Theme, get_config, save_theme
from actnames.constants import MAX_RECORD_COUNT
from actnames.logging import UVICORN_LOG_CONFIG, configure_logging
from actnames.ranking import SearchScope, SortMode, rank_scored
from actnames.session import SearchContext
from actnames.sources.arcgis import FeatureService
from actnames.sources.base import ActNamesError
from actnames.sources.wikipedia import SummaryService, SummaryStatus
from actnames.stats import CountEntry, compute_stats
from actnames.views import ResultCard, build_card, status_message, summary_terms

console = Console()


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise SystemExit(1)


def _require_config(ctx: click.Context):
    if "config_error" in ctx.obj:
        _fail(ctx.obj["config_error"])
    return ctx.obj["config"]


def _feature_service(config) -> FeatureService:
    return FeatureService(layer_url=config.layer_url, timeout=config.http_timeout, page_size=config.page_size)


def _summary_service(config) -> SummaryService:
    return SummaryService(base_url=config.summary_url, timeout=config.http_timeout)


def _run(coro):
    try:
        return asyncio.run(coro)
    except (ActNamesError, httpx.HTTPError) as e:
        _fail(str(e))


def _results_table(cards: list[ResultCard], show_score: bool = False) -> Table:
    table = Table(show_lines=False, expand=True)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Category", style="cyan")
    table.add_column("Named after")
    if show_score:
        table.add_column("Score", justify="right", style="magenta")
    table.add_column("Biography", overflow="fold", ratio=2)

    for card in cards:
        row = [str(card.object_id), escape(card.name), escape(card.category), escape(card.named_after)]
        if show_score:
            row.append(str(card.score or 0))
        row.append(escape(card.biography_preview))
        table.add_row(*row)
    return table


def _print_counts(title: str, entries: list[CountEntry]) -> None:
    if not entries:
        return
    table = Table(title=title, title_justify="left")
    table.add_column("Name")
    table.add_column("Count", justify="right")
    table.add_column("")
    peak = entries[0].count
    for entry in entries:
        bar = "█" * max(1, round(20 * entry.count / peak))
        table.add_row(escape(entry.name), str(entry.count), f"[green]{bar}[/green]")
    console.print(table)


@click.group(invoke_without_command=True)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, verbose: bool):
    """actnames - search ACT Government place names"""
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = get_config()
    except (ValidationError, ValueError) as e:
        ctx.obj["config_error"] = str(e)
        configure_logging("DEBUG" if verbose else "WARNING")
    else:
        configure_logging("DEBUG" if verbose else ctx.obj["config"].log_level)

    if ctx.invoked_subcommand is None:
        console.print("[bold]actnames[/bold] - ACT place names explorer\n")
        console.print('Run [cyan]actnames search "mawson"[/cyan] to look up a name.')
        console.print("\nUse [cyan]actnames --help[/cyan] for all commands.")


@main.command()
@click.pass_context
def status(ctx):
    """Show configuration and data source status."""
    config = _require_config(ctx)

    console.print("[bold]actnames status[/bold]")
    console.print()
    console.print(f"Layer: [cyan]{config.layer_url}[/cyan]")
    console.print(f"Summaries: [cyan]{config.summary_url}[/cyan]")
    console.print(f"Search limit: {config.search_limit}")
    console.print(f"Theme: {config.theme}")

    info = _run(_feature_service(config).get_layer_info())
    console.print(f"Loaded [green]{escape(info.name or 'ACT place names')}[/green].")


@main.command()
@click.argument("query", default="")
@click.option("--category", default="", help="Only entries in this category")
@click.option("--limit", type=click.IntRange(1, MAX_RECORD_COUNT), default=None, help="Max results")
@click.pass_context
def search(ctx, query: str, category: str, limit: int | None):
    """Query the live layer and rank matches.

    QUERY is matched against names, alternative names and descriptions.
    """
    config = _require_config(ctx)
    query = query.strip()
    result = _run(
        _feature_service(config).search_places(query=query, category=category, limit=limit or config.search_limit)
    )

    if not result.features:
        console.print("[dim]No matches.[/dim] Try a broader search term or switch categories.")
        return

    cards = [build_card(f, config.preview_length) for f in result.features]
    console.print(_results_table(cards))
    if result.exceeded_transfer_limit:
        console.print(
            f"[yellow]Showing the first {result.count} matches.[/yellow] "
            "Refine search text or category for tighter results."
        )
    console.print(f"[dim]{escape(status_message(result.count, query, category))}[/dim]")


@main.command()
@click.argument("query", default="")
@click.option("--category", "categories", multiple=True, help="Category to include (repeatable)")
@click.option("--division", default=None, help="Division code to match exactly")
@click.option(
    "--scope",
    type=click.Choice([s.value for s in SearchScope], case_sensitive=False),
    default=SearchScope.ALL.value,
    help="Fields a query may match",
)
@click.option(
    "--sort",
    type=click.Choice([s.value for s in SortMode], case_sensitive=False),
    default=SortMode.RELEVANCE.value,
    help="Result ordering",
)
@click.option("--limit", type=click.IntRange(1, MAX_RECORD_COUNT), default=None, help="Results per page")
@click.option("--more", type=click.IntRange(0), default=0, help="Extra pages to show")
@click.pass_context
def explore(
    ctx,
    query: str,
    categories: tuple[str, ...],
    division: str | None,
    scope: str,
    sort: str,
    limit: int | None,
    more: int,
):
    """Download the whole dataset and filter it locally."""
    config = _require_config(ctx)

    search_ctx = SearchContext(page_size=limit or config.search_limit)
    search_ctx.set_query(query)
    search_ctx.set_categories(categories)
    search_ctx.set_division(division)
    search_ctx.set_scope(scope.lower())
    search_ctx.set_sort(sort.lower())
    search_ctx.show_more(more)

    with console.status("Loading ACT place names..."):
        dataset = _run(_feature_service(config).fetch_all_features())

    ranked = rank_scored(dataset, search_ctx.query, search_ctx.filters, search_ctx.sort)
    if not ranked:
        console.print("[dim]No matches.[/dim] Try a broader search term or switch categories.")
        return

    visible = search_ctx.visible(ranked)
    cards = [build_card(r.feature, config.preview_length, score=r.score) for r in visible]
    console.print(_results_table(cards, show_score=bool(search_ctx.query)))
    console.print(f"[dim]Showing {len(visible)} of {len(ranked)} matches.[/dim]")
    if search_ctx.has_more(ranked):
        console.print(f"[dim]Use --more {more + 1} to see more.[/dim]")


@main.command()
@click.argument("object_id", type=int)
@click.option("--no-summary", is_flag=True, help="Skip the Wikipedia lookup")
@click.pass_context
def show(ctx, object_id: int, no_summary: bool):
    """Show one place name in full."""
    config = _require_config(ctx)
    feature = _run(_feature_service(config).get_feature(object_id))
    if feature is None:
        _fail(f"No place name with id {object_id}")

    card = build_card(feature, config.preview_length)
    lines = [f"[bold]Named after[/bold] {escape(card.named_after)}", ""]
    if card.biography:
        lines += [escape(card.biography), ""]
    for detail in card.details:
        lines.append(f"[dim]{escape(detail.label)}:[/dim] {escape(detail.value)}")
    if card.gazettal_information:
        lines.append(f"[dim]Gazettal:[/dim] {escape(card.gazettal_information)}")
    if card.division_code:
        lines.append(f"[dim]Division code:[/dim] {escape(card.division_code)}")
    if card.maps_url:
        lines.append(f"[dim]Map:[/dim] {card.maps_url}")

    console.print(Panel("\n".join(lines).rstrip(), title=escape(card.name), subtitle=escape(card.category)))

    if no_summary:
        return

    primary, fallback = summary_terms(feature)
    lookup = asyncio.run(_summary_service(config).lookup(primary, fallback))

    match lookup.status:
        case SummaryStatus.SUCCESS:
            summary = lookup.summary
            body = escape(summary.extract)
            if summary.page_url:
                body += f"\n\n[dim]{summary.page_url}[/dim]"
            console.print(Panel(body, title=f"Wikipedia: {escape(summary.title)}"))
        case SummaryStatus.DISAMBIGUATION:
            console.print(f"[dim]Wikipedia has several pages for {escape(lookup.term or primary)}.[/dim]")
        case SummaryStatus.ERROR:
            console.print(f"[yellow]Wikipedia unavailable:[/yellow] {escape(lookup.error or '')}")
        case _:
            console.print("[dim]No Wikipedia summary found.[/dim]")


@main.command()
@click.pass_context
def categories(ctx):
    """List the categories in the layer."""
    config = _require_config(ctx)
    for category in _run(_feature_service(config).get_categories()):
        console.print(escape(category))


@main.command()
@click.pass_context
def stats(ctx):
    """Summarise the whole dataset."""
    config = _require_config(ctx)
    with console.status("Loading ACT place names..."):
        dataset = _run(_feature_service(config).fetch_all_features())

    result = compute_stats(dataset)
    console.print(
        f"[bold]{result.total_features:,}[/bold] features · "
        f"[bold]{result.total_categories}[/bold] categories · "
        f"[bold]{result.total_divisions}[/bold] divisions"
    )
    _print_counts("Category Distribution", result.category_distribution)
    _print_counts("Top Divisions", result.top_divisions)
    _print_counts("Most Commemorated Names", result.top_commemorated_names)


@main.command()
@click.argument("theme", required=False, type=click.Choice([t.value for t in Theme]))
@click.pass_context
def theme(ctx, theme: str | None):
    """Show or set the preferred colour theme."""
    config = _require_config(ctx)
    if theme is None:
        console.print(f"Theme: {config.theme}")
        return
    save_theme(Theme(theme))
    console.print(f"Theme set to [cyan]{theme}[/cyan]")


@main.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8000, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.pass_context
def serve(ctx, host: str, port: int, reload: bool):
    """Start the actnames API server."""
    _require_config(ctx)

    import uvicorn

    console.print(f"[bold]actnames server[/bold] starting on http://{host}:{port}")
    console.print("[dim]Press Ctrl+C to stop[/dim]")
    console.print()

    uvicorn.run(
        "actnames.server.app:app",
        host=host,
        port=port,
        reload=reload,
        log_config=UVICORN_LOG_CONFIG,
    )


if __name__ == "__main__":
    main()
