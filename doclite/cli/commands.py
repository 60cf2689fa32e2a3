"""Document CLI commands."""

import click

from doclite.cli.output import documents_table, print_error
from doclite.cli.parsing import parse_json, parse_query, parse_sort


def _save(ctx: click.Context) -> None:
    """Persist the store after a write; exit 1 when that fails."""
    if not ctx.obj.store.save():
        location = ctx.obj.store.backend.location
        print_error(ctx.obj.console, f"Could not save to {location}")
        ctx.exit(1)


@click.command()
@click.argument("documents", nargs=-1, required=True)
@click.pass_context
def insert(ctx: click.Context, documents: tuple[str, ...]) -> None:
    """Insert one or more JSON documents (or JSON arrays of documents).

    Prints the last assigned id. Accepted documents are saved even when
    others are rejected; any rejection makes the exit status 1.
    """
    store = ctx.obj.store
    inserted: list[int] = []
    rejected = 0
    for text in documents:
        value = parse_json(text)
        for document in value if isinstance(value, list) else [value]:
            doc_id = store.insert(document)
            if doc_id == -1:
                rejected += 1
            else:
                inserted.append(doc_id)

    if inserted:
        _save(ctx)
        click.echo(inserted[-1])
    if rejected:
        total = rejected + len(inserted)
        print_error(ctx.obj.console, f"Rejected {rejected} of {total} documents")
        ctx.exit(1)


@click.command()
@click.argument("query", required=False)
@click.option("--sort", "sort_spec", help="Sort by FIELD or FIELD:-1")
@click.option("--limit", type=click.IntRange(min=0), help="Maximum documents")
@click.option("--skip", type=click.IntRange(min=0), help="Documents to skip")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.option("--count", "count_only", is_flag=True, help="Only print the count")
@click.pass_context
def find(
    ctx: click.Context,
    query: str | None,
    sort_spec: str | None,
    limit: int | None,
    skip: int | None,
    output_format: str,
    count_only: bool,
) -> None:
    """Find documents matching QUERY (all documents when omitted)."""
    cursor = ctx.obj.store.find(parse_query(query))

    if sort_spec:
        field, direction = parse_sort(sort_spec)
        cursor.sort(field, direction)
    if skip is not None:
        cursor.skip(skip)
    if limit is not None:
        cursor.limit(limit)

    if count_only:
        click.echo(cursor.count())
    elif output_format == "json":
        click.echo(cursor.to_json(indent=2))
    elif cursor.count() == 0:
        ctx.obj.console.print("[yellow]No documents found[/yellow]")
    else:
        ctx.obj.console.print(documents_table(cursor.to_array()))


@click.command()
@click.argument("query")
@click.argument("changes")
@click.option("--multi", is_flag=True, help="Update every matching document")
@click.option("--upsert", is_flag=True, help="Insert the $set document if none match")
@click.pass_context
def update(
    ctx: click.Context, query: str, changes: str, multi: bool, upsert: bool
) -> None:
    """Apply an update such as {"$set": {...}} to documents matching QUERY."""
    altered = ctx.obj.store.update(
        parse_query(query) or {},
        parse_json(changes),
        {"multi": multi, "upsert": upsert},
    )
    if altered:
        _save(ctx)
    click.echo(altered)


@click.command()
@click.argument("query", required=False)
@click.option("--yes", "-y", is_flag=True, help="Do not ask before removing all")
@click.pass_context
def remove(ctx: click.Context, query: str | None, yes: bool) -> None:
    """Remove documents matching QUERY (all documents when omitted)."""
    parsed = parse_query(query)
    if parsed is None and not yes:
        click.confirm("Remove every document?", abort=True)

    removed = ctx.obj.store.remove(parsed)
    if removed:
        _save(ctx)
    click.echo(removed)


@click.command()
@click.pass_context
def count(ctx: click.Context) -> None:
    """Print the number of stored documents."""
    click.echo(ctx.obj.store.count())


@click.command()
@click.pass_context
def now(ctx: click.Context) -> None:
    """Print the current UTC timestamp."""
    click.echo(ctx.obj.store.now())
