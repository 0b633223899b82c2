"""CLI interface for inkwell."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from inkwell.config import InkwellConfig, StoreBackend, load_config, merge_cli_overrides
from inkwell.drafts import Draft, DraftAutosaver, DraftStore
from inkwell.errors import InkwellError
from inkwell.posts import PostForm, PostService
from inkwell.posts.formatting import calculate_reading_time, format_date, relative_time
from inkwell.store import open_store

app = typer.Typer(
    name="inkwell",
    help="Write, edit, and browse blog posts and drafts.",
    no_args_is_help=True,
)
drafts_app = typer.Typer(help="Save, list, restore, and delete drafts.", no_args_is_help=True)
app.add_typer(drafts_app, name="drafts")

console = Console()
err_console = Console(stderr=True)

TitleOption = Annotated[Optional[str], typer.Option("--title", "-t", help="Post title.")]
ContentOption = Annotated[
    Optional[str], typer.Option("--content", help="Post body as markdown text.")
]
FileOption = Annotated[
    Optional[Path],
    typer.Option("--file", "-f", help="Read the post body from a markdown file.", exists=True, dir_okay=False),
]
CategoryOption = Annotated[Optional[str], typer.Option("--category", "-c", help="Post category.")]
TagOption = Annotated[
    Optional[list[str]], typer.Option("--tag", help="Tag to attach (repeatable).")
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from inkwell import __version__

        console.print(f"inkwell {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", help="Log debug output.")] = False,
    config_path: Annotated[
        Optional[Path], typer.Option("--config", help="Path to an .inkwell.toml file.")
    ] = None,
    backend: Annotated[
        Optional[StoreBackend], typer.Option("--backend", help="Document store backend.")
    ] = None,
    store_path: Annotated[
        Optional[Path], typer.Option("--store-path", help="JSON file for the local backend.")
    ] = None,
) -> None:
    """Inkwell - a personal blog back end."""
    _configure_logging(verbose)
    try:
        config = load_config(config_path)
        ctx.obj = merge_cli_overrides(
            config,
            store_backend=backend.value if backend else None,
            store_path=str(store_path) if store_path else None,
        )
    except InkwellError as exc:
        raise _fail(exc) from exc


def _fail(exc: InkwellError) -> typer.Exit:
    console.print(f"[red]Error:[/red] {escape(str(exc))}")
    return typer.Exit(1)


def _services(ctx: typer.Context) -> tuple[InkwellConfig, PostService, DraftStore]:
    config: InkwellConfig = ctx.obj
    store = open_store(config)
    posts = PostService(
        store,
        extra_letters=config.slug.extra_letters,
        max_attempts=config.slug.max_attempts,
    )
    return config, posts, DraftStore(store)


def _read_body(content: str | None, file: Path | None) -> str | None:
    if file is not None:
        return file.read_text(encoding="utf-8")
    return content


def _apply_options(
    form: PostForm,
    title: str | None,
    body: str | None,
    category: str | None,
    tags: list[str] | None,
) -> PostForm:
    if title is not None:
        form.title = title
    if body is not None:
        form.content = body
    if category is not None:
        form.category = category
    if tags:
        form.tags = []
        for tag in tags:
            form.add_tag(tag)
    return form


# ── Posts ────────────────────────────────────────────────────────


@app.command(name="list")
def list_cmd(
    ctx: typer.Context,
    category: CategoryOption = None,
    search: Annotated[
        Optional[str], typer.Option("--search", "-s", help="Match title or body text.")
    ] = None,
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", min=1)] = None,
    include_unpublished: Annotated[
        bool, typer.Option("--all", help="Include unpublished posts.")
    ] = False,
) -> None:
    """List posts, newest first."""
    try:
        _, posts, _ = _services(ctx)
        results = posts.list_posts(
            category=category,
            search=search,
            limit=limit,
            published_only=not include_unpublished,
        )
    except InkwellError as exc:
        raise _fail(exc) from exc

    if not results:
        console.print("[yellow]No posts found.[/yellow]")
        return

    table = Table(title=f"{len(results)} post(s)")
    table.add_column("Slug", style="cyan")
    table.add_column("Title")
    table.add_column("Category")
    table.add_column("Date")
    table.add_column("Read", justify="right")
    for post in results:
        title = escape(post.title) if post.published else f"{escape(post.title)} [dim](unpublished)[/dim]"
        table.add_row(
            post.slug,
            title,
            escape(post.category or ""),
            format_date(post.created_at, "short"),
            f"{calculate_reading_time(post.content)} min",
        )
    console.print(table)


@app.command(name="show")
def show_cmd(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Slug of the post to show.")],
    include_unpublished: Annotated[
        bool, typer.Option("--all", help="Also match unpublished posts.")
    ] = False,
) -> None:
    """Show a single post."""
    try:
        _, posts, _ = _services(ctx)
        post = posts.get_by_slug(slug, published_only=not include_unpublished)
    except InkwellError as exc:
        raise _fail(exc) from exc

    if post is None:
        console.print(f"[red]Error:[/red] No post with slug {slug!r}")
        raise typer.Exit(1)

    console.print(f"[bold]{escape(post.title)}[/bold]")
    meta = [format_date(post.created_at), f"{calculate_reading_time(post.content)} min read"]
    if post.category:
        meta.insert(0, post.category)
    console.print(escape(" · ".join(meta)), style="dim")
    if post.tags:
        console.print(escape(" ".join(f"#{tag}" for tag in post.tags)), style="magenta")
    console.print()
    console.print(post.content, markup=False, highlight=False, soft_wrap=True)


@app.command(name="categories")
def categories_cmd(ctx: typer.Context) -> None:
    """List the categories of published posts."""
    try:
        _, posts, _ = _services(ctx)
        categories = posts.list_categories()
    except InkwellError as exc:
        raise _fail(exc) from exc

    if not categories:
        console.print("[yellow]No categories yet.[/yellow]")
        return
    for name in categories:
        console.print(f"  - {escape(name)}")


@app.command(name="write")
def write_cmd(
    ctx: typer.Context,
    title: TitleOption = None,
    content: ContentOption = None,
    file: FileOption = None,
    category: CategoryOption = None,
    tag: TagOption = None,
    publish: Annotated[
        bool, typer.Option("--publish/--unpublished", help="Publish immediately.")
    ] = True,
) -> None:
    """Create a new post."""
    form = _apply_options(PostForm(), title, _read_body(content, file), category, tag)
    try:
        _, posts, _ = _services(ctx)
        post = posts.create(form, publish=publish)
    except InkwellError as exc:
        raise _fail(exc) from exc

    state = "Published" if post.published else "Saved"
    console.print(f"[green]{state}:[/green] {post.slug} (id {post.id})")


@app.command(name="edit")
def edit_cmd(
    ctx: typer.Context,
    post_id: Annotated[str, typer.Argument(help="Id of the post to edit.")],
    title: TitleOption = None,
    content: ContentOption = None,
    file: FileOption = None,
    category: CategoryOption = None,
    tag: TagOption = None,
    publish: Annotated[
        Optional[bool],
        typer.Option("--publish/--unpublish", help="Change the published state."),
    ] = None,
) -> None:
    """Edit an existing post; unspecified fields keep their current values."""
    try:
        _, posts, _ = _services(ctx)
        current = posts.get(post_id)
        if current is None:
            console.print(f"[red]Error:[/red] No post with id {post_id!r}")
            raise typer.Exit(1)
        form = _apply_options(current.to_form(), title, _read_body(content, file), category, tag)
        post = posts.update(post_id, form, publish=current.published if publish is None else publish)
    except InkwellError as exc:
        raise _fail(exc) from exc

    console.print(f"[green]Updated:[/green] {post.slug}")


# ── Drafts ───────────────────────────────────────────────────────


@drafts_app.command(name="list")
def drafts_list_cmd(
    ctx: typer.Context,
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", min=1)] = None,
) -> None:
    """List recent drafts, newest first."""
    try:
        config, _, drafts = _services(ctx)
        results = drafts.list(limit or config.drafts.list_limit)
    except InkwellError as exc:
        raise _fail(exc) from exc

    _print_drafts(drafts, results)


def _print_drafts(drafts: DraftStore, results: list[Draft]) -> None:
    if not results:
        console.print("[yellow]No saved drafts.[/yellow]")
        return

    table = Table(title=f"{len(results)} draft(s)")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Preview")
    table.add_column("Category")
    table.add_column("Saved")
    for draft in results:
        form = drafts.restore(draft)
        table.add_row(
            draft.id,
            escape(form.title or "(untitled)"),
            escape(form.content[:100] or "(empty)"),
            escape(form.category or ""),
            relative_time(draft.created_at),
        )
    console.print(table)


@drafts_app.command(name="save")
def drafts_save_cmd(
    ctx: typer.Context,
    title: TitleOption = None,
    content: ContentOption = None,
    file: FileOption = None,
    category: CategoryOption = None,
    tag: TagOption = None,
    post_id: Annotated[
        Optional[str], typer.Option("--post-id", help="Link the draft to an existing post.")
    ] = None,
) -> None:
    """Save a draft snapshot."""
    form = _apply_options(PostForm(), title, _read_body(content, file), category, tag)
    try:
        _, _, drafts = _services(ctx)
        draft = drafts.save(form, post_id=post_id)
    except InkwellError as exc:
        raise _fail(exc) from exc

    console.print(f"[green]Draft saved:[/green] {draft.id} at {draft.created_at:%H:%M:%S}")


@drafts_app.command(name="watch")
def drafts_watch_cmd(
    ctx: typer.Context,
    file: Annotated[
        Path, typer.Argument(help="Markdown file being edited.", exists=True, dir_okay=False)
    ],
    title: TitleOption = None,
    category: CategoryOption = None,
    interval: Annotated[
        Optional[float], typer.Option("--interval", help="Seconds of quiet before saving.")
    ] = None,
    poll: Annotated[float, typer.Option("--poll", help="Seconds between file checks.")] = 1.0,
    duration: Annotated[
        Optional[float], typer.Option("--duration", help="Stop after this many seconds.")
    ] = None,
) -> None:
    """Autosave drafts of a file while it is being edited (Ctrl-C to stop)."""
    try:
        config, _, drafts = _services(ctx)
    except InkwellError as exc:
        raise _fail(exc) from exc

    form = _apply_options(PostForm(title=title or file.stem), None, None, category, None)
    saver = DraftAutosaver(drafts, form, interval=interval or config.drafts.autosave_interval)
    console.print(f"Watching {file} (autosave after {saver.interval:g}s idle)")

    last_mtime: float | None = None
    started = time.monotonic()
    try:
        while duration is None or time.monotonic() - started < duration:
            mtime = file.stat().st_mtime
            if mtime != last_mtime:
                last_mtime = mtime
                form.content = file.read_text(encoding="utf-8")
                saver.notify_change()
            time.sleep(poll)
    except KeyboardInterrupt:
        pass
    finally:
        saver.cancel()

    if saver.last_saved is not None:
        console.print(f"[green]Last autosave:[/green] {saver.last_saved:%H:%M:%S}")


@drafts_app.command(name="restore")
def drafts_restore_cmd(
    ctx: typer.Context,
    draft_id: Annotated[str, typer.Argument(help="Id of the draft to restore.")],
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Write the form JSON to a file.")
    ] = None,
) -> None:
    """Print (or write) the form stored in a draft."""
    try:
        _, _, drafts = _services(ctx)
        draft = drafts.get(draft_id)
        if draft is None:
            console.print(f"[red]Error:[/red] No draft with id {draft_id!r}")
            raise typer.Exit(1)
        form = drafts.restore(draft)
    except InkwellError as exc:
        raise _fail(exc) from exc

    payload = json.dumps(form.model_dump(), indent=2, ensure_ascii=False)
    if output is not None:
        output.write_text(payload + "\n", encoding="utf-8")
        console.print(f"[green]Restored draft written to:[/green] {output}")
    else:
        console.print(payload, markup=False, highlight=False, soft_wrap=True)


@drafts_app.command(name="delete")
def drafts_delete_cmd(
    ctx: typer.Context,
    draft_id: Annotated[str, typer.Argument(help="Id of the draft to delete.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt.")] = False,
) -> None:
    """Delete a draft after confirmation."""
    if not yes and not typer.confirm(f"Delete draft {draft_id}?"):
        console.print("Cancelled.")
        raise typer.Exit(0)
    try:
        config, _, drafts = _services(ctx)
        drafts.discard(draft_id)
    except InkwellError as exc:
        raise _fail(exc) from exc

    console.print(f"[green]Deleted draft:[/green] {draft_id}")
    try:
        remaining = drafts.list(config.drafts.list_limit)
    except InkwellError as exc:
        raise _fail(exc) from exc
    _print_drafts(drafts, remaining)


if __name__ == "__main__":
    app()
