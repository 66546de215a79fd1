import asyncio
from typing import Annotated

from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from typer import Argument, Exit, Option, Typer

from .composer import AnswerComposer
from .config import (
    ACTIVITIES_COLLECTION,
    RECIPES_COLLECTION,
    resolve_db_path,
    resolve_dimension,
)
from .embeddings import EmbeddingProvider
from .errors import EmbeddingsLabError
from .indexing import (
    IngestionPipeline,
    load_recipe_titles,
    load_sample_embeddings,
    write_titles,
)
from .log import configure_logging
from .search import (
    DEFAULT_THRESHOLD,
    WINTER_PATTERNS,
    SimilaritySearchEngine,
    TextRetriever,
)
from .storage import DuckDBVectorStore, SearchResult
from .workflow import AnswerEndEvent, ContextEvent, QuestionEvent, RecipeQAWorkflow

app = Typer(help="Vector similarity search and RAG over recipe and travel collections.")

SAMPLE_QUESTIONS = [
    "What are some meals with chicken?",
    "What are some low calorie meals?",
    "What are some vegetarian meals?",
    "What are some hot desserts?",
]

CollectionOption = Annotated[
    str, Option("--collection", "-c", help="Collection (table) to use.")
]
DbPathOption = Annotated[
    str | None, Option("--db-path", help="DuckDB file. Defaults to EMBEDDINGS_LAB_DB_PATH.")
]
DimOption = Annotated[
    int | None, Option("--dim", help="Embedding dimension. Defaults to EMBEDDINGS_LAB_EMBEDDING_DIM.")
]
LimitOption = Annotated[int, Option("--limit", "-k", help="Maximum number of results.")]


@app.callback()
def callback(
    log_level: Annotated[
        str | None, Option("--log-level", help="Log level (DEBUG, INFO, WARNING...).")
    ] = None,
) -> None:
    load_dotenv()
    configure_logging(log_level)


def open_store(
    collection: str,
    db_path: str | None,
    dim: int | None,
    *,
    initialize: bool = True,
) -> DuckDBVectorStore:
    return DuckDBVectorStore(
        resolve_db_path(db_path),
        collection=collection,
        dimension=resolve_dimension(dim),
        initialize=initialize,
    )


def render_results(console: Console, title: str, results: list[SearchResult]) -> None:
    if not results:
        console.print(f"[bold yellow]{title}: no matching records[/]")
        return
    table = Table(title=title, title_justify="left")
    table.add_column("id", justify="right")
    table.add_column("label")
    table.add_column("similarity", justify="right")
    for result in results:
        table.add_row(str(result.id), result.label, f"{result.similarity:.4f}")
    console.print(table)


def fail(console: Console, exc: Exception) -> Exit:
    console.print(f"[bold red]Error:[/] {exc}")
    return Exit(code=1)


@app.command()
def setup(
    collection: CollectionOption = RECIPES_COLLECTION,
    db_path: DbPathOption = None,
    dim: DimOption = None,
) -> None:
    """Create the collection table if it does not exist."""
    console = Console()
    try:
        store = open_store(collection, db_path, dim)
    except (EmbeddingsLabError, ValueError) as exc:
        raise fail(console, exc)
    store.close()
    console.print(
        f"[bold green]Database setup complete![/] {collection} "
        f"(dimension {store.dimension}) in {store.db_path}"
    )


@app.command("load-recipes")
def load_recipes(
    recipes_file: Annotated[str, Argument(help="JSON array of recipe objects.")],
    collection: CollectionOption = RECIPES_COLLECTION,
    db_path: DbPathOption = None,
    dim: DimOption = None,
    titles_out: Annotated[
        str | None, Option("--titles-out", help="Also save the extracted titles here.")
    ] = None,
) -> None:
    """Embed every recipe title and store it."""
    console = Console()
    try:
        titles = load_recipe_titles(recipes_file)
        if titles_out:
            write_titles(titles, titles_out)
            console.print(f"Recipes saved to {titles_out}")
        store = open_store(collection, db_path, dim)
        provider = EmbeddingProvider(dim=store.dimension)
        with console.status(status=f"Embedding {len(titles)} titles..."):
            result = IngestionPipeline(store, embedding_provider=provider).ingest_texts(titles)
        store.close()
    except (EmbeddingsLabError, ValueError) as exc:
        raise fail(console, exc)

    console.print(
        Panel(
            f"Stored {result.records_written} embeddings in `{result.collection}` "
            f"({result.skipped_texts} blank titles skipped, "
            f"{result.total_records} records total).",
            title="Load Complete",
            title_align="left",
            border_style="bold green",
        )
    )


@app.command("load-activities")
def load_activities(
    samples_file: Annotated[
        str, Argument(help="JSON array of {activity, embedding} objects.")
    ],
    collection: CollectionOption = ACTIVITIES_COLLECTION,
    db_path: DbPathOption = None,
) -> None:
    """Store pre-computed activity embeddings from a sample file."""
    console = Console()
    try:
        samples = load_sample_embeddings(samples_file)
        if not samples:
            console.print("[bold yellow]No samples found.[/]")
            return
        store = open_store(collection, db_path, len(samples[0].embedding))
        result = IngestionPipeline(store).ingest_embedded(
            [(sample.activity, sample.embedding) for sample in samples]
        )
        store.close()
    except (EmbeddingsLabError, ValueError) as exc:
        raise fail(console, exc)

    console.print(
        Panel(
            f"Stored {result.records_written} activities in `{result.collection}` "
            f"({result.total_records} records total).",
            title="Load Complete",
            title_align="left",
            border_style="bold green",
        )
    )


@app.command()
def check(
    collection: CollectionOption = RECIPES_COLLECTION,
    db_path: DbPathOption = None,
    dim: DimOption = None,
) -> None:
    """Report how many records a collection holds."""
    console = Console()
    try:
        store = open_store(collection, db_path, dim, initialize=False)
        if not store.exists():
            store.close()
            console.print(f"[bold red]Collection {collection} does not exist.[/]")
            raise Exit(code=1)
        count = store.count()
        store.close()
    except EmbeddingsLabError as exc:
        raise fail(console, exc)
    console.print(f"Found {count} records in {collection}")


@app.command()
def search(
    query: Annotated[str, Argument(help="Free-text query to embed and search for.")],
    collection: CollectionOption = RECIPES_COLLECTION,
    db_path: DbPathOption = None,
    dim: DimOption = None,
    limit: LimitOption = 5,
    threshold: Annotated[
        float | None,
        Option("--threshold", "-t", help="Keep only results with similarity above this."),
    ] = None,
    pattern: Annotated[
        list[str] | None,
        Option("--pattern", "-p", help="Case-insensitive label substring; repeatable."),
    ] = None,
    winter: Annotated[
        bool, Option("--winter", help="Restrict to winter-themed labels.")
    ] = False,
) -> None:
    """Embed QUERY and rank the collection by cosine similarity."""
    console = Console()
    patterns = list(pattern or [])
    if winter:
        patterns.extend(WINTER_PATTERNS)
    if patterns and threshold is not None:
        raise fail(console, ValueError("Use either --threshold or label patterns, not both."))
    try:
        store = open_store(collection, db_path, dim, initialize=False)
    except (EmbeddingsLabError, ValueError) as exc:
        raise fail(console, exc)
    try:
        store.ensure_collection()
        engine = SimilaritySearchEngine(store)
        query_embedding = EmbeddingProvider(dim=store.dimension).embed_query(query)
        if patterns:
            results = engine.find_with_text_filter(query_embedding, patterns, limit)
        elif threshold is not None:
            results = engine.find_above_threshold(query_embedding, threshold, limit)
        else:
            results = engine.find_top_k(query_embedding, limit)
    except (EmbeddingsLabError, ValueError) as exc:
        raise fail(console, exc)
    finally:
        store.close()
    render_results(console, f"Results for {query!r}", results)


@app.command()
def similar(
    reference: Annotated[
        list[str],
        Option("--reference", "-r", help="Label of a stored record; repeatable."),
    ],
    collection: CollectionOption = ACTIVITIES_COLLECTION,
    db_path: DbPathOption = None,
    dim: DimOption = None,
    limit: LimitOption = 5,
) -> None:
    """Find records similar to the average of several stored references."""
    console = Console()
    try:
        store = open_store(collection, db_path, dim, initialize=False)
    except (EmbeddingsLabError, ValueError) as exc:
        raise fail(console, exc)
    try:
        store.ensure_collection()
        vectors = []
        for label in reference:
            record = store.get_by_label(label)
            if record is None:
                raise ValueError(f"No record labelled {label!r} in {collection}.")
            vectors.append(record.embedding)
        results = SimilaritySearchEngine(store).find_similar_to_multiple(vectors, limit)
    except (EmbeddingsLabError, ValueError) as exc:
        raise fail(console, exc)
    finally:
        store.close()
    render_results(console, "Similar to " + ", ".join(reference), results)


async def run_questions(workflow: RecipeQAWorkflow, questions: list[str]) -> int:
    console = Console()
    failures = 0
    for question in questions:
        console.print(f"\n[bold cyan]Question:[/] {question}")
        handler = workflow.run(start_event=QuestionEvent(question=question))
        with console.status(status="Searching similar recipes..."):
            async for event in handler.stream_events():
                if isinstance(event, ContextEvent):
                    render_results(console, "Context", event.results)
            result: AnswerEndEvent = await handler
        if result.error is not None:
            failures += 1
            console.print(f"[bold red]Error:[/] {result.error}")
            continue
        console.print(
            Panel(
                Markdown(result.answer or ""),
                title="Answer",
                title_align="left",
                border_style="bold green",
            )
        )
    return failures


@app.command()
def ask(
    questions: Annotated[
        list[str] | None, Argument(help="Questions to answer. Defaults to samples.")
    ] = None,
    collection: CollectionOption = RECIPES_COLLECTION,
    db_path: DbPathOption = None,
    dim: DimOption = None,
    limit: LimitOption = 3,
    threshold: Annotated[
        float, Option("--threshold", "-t", help="Minimum similarity for context.")
    ] = DEFAULT_THRESHOLD,
) -> None:
    """Answer recipe questions using retrieved recipes as context."""
    console = Console()
    try:
        store = open_store(collection, db_path, dim, initialize=False)
    except (EmbeddingsLabError, ValueError) as exc:
        raise fail(console, exc)
    try:
        store.ensure_collection()
        retriever = TextRetriever(
            SimilaritySearchEngine(store),
            EmbeddingProvider(dim=store.dimension),
            threshold=threshold,
            limit=limit,
        )
        workflow = RecipeQAWorkflow(
            retriever=retriever, composer=AnswerComposer(), timeout=120
        )
        failures = asyncio.run(run_questions(workflow, questions or SAMPLE_QUESTIONS))
    except (EmbeddingsLabError, ValueError) as exc:
        raise fail(console, exc)
    finally:
        store.close()
    if failures:
        raise Exit(code=1)


@app.command()
def serve(
    host: Annotated[str, Option("--host")] = "127.0.0.1",
    port: Annotated[int, Option("--port")] = 8000,
) -> None:
    """Run the HTTP search API."""
    from .server import run_server

    run_server(host=host, port=port)
