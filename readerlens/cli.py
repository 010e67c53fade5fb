"""
readerlens command line.

Usage:
    readerlens providers
    readerlens analyze report.pdf
    readerlens feedback report.docx --reader 2
    readerlens feedback report.docx --custom "产品经理" --description "关注落地成本"
    readerlens serve --port 8000
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from readerlens.config.settings import LLMSettings
from readerlens.documents import DocumentError, ingest_document
from readerlens.llm.exceptions import LLMError
from readerlens.llm.factory import get_available_providers
from readerlens.llm.gateway import LLMGateway
from readerlens.logging_config import setup_logging
from readerlens.models import AnalyzeResult, ReaderFeedback, SuggestedReader

console = Console()


def _load_document(path: str):
    file_path = Path(path)
    document = ingest_document(file_path.read_bytes(), None, file_path.name)

    parts = [document.doc_type.upper()]
    if document.metadata.get("pages"):
        parts.append(f"{document.metadata['pages']} pages")
    parts.append(f"{document.word_count} words")
    parts.append(f"{document.char_count} chars")
    label = document.filename
    if document.metadata.get("title"):
        label += f" ({document.metadata['title']})"
    console.print(f"[dim]{label}: {', '.join(parts)}[/dim]")
    return document


def _fail(message: str, code: str):
    console.print(f"[red]✗ {message}[/red] [dim]({code})[/dim]")
    sys.exit(1)


def _print_analysis(result: AnalyzeResult):
    analysis = result.analysis
    console.print(Panel(
        f"[bold]主题:[/bold] {analysis.theme}\n"
        f"[bold]语气:[/bold] {analysis.tone}\n"
        f"[bold]目标读者:[/bold] {analysis.target_audience}",
        title="文档分析",
        border_style="cyan",
    ))

    table = Table(title="推荐读者")
    table.add_column("#", justify="right", style="dim")
    table.add_column("身份", style="bold")
    table.add_column("描述")
    for i, reader in enumerate(result.suggested_readers, start=1):
        table.add_row(str(i), reader.name, reader.description)
    console.print(table)


def _print_feedback(feedback: ReaderFeedback):
    score_style = "green" if feedback.first_impression_score >= 7 else (
        "yellow" if feedback.first_impression_score >= 4 else "red"
    )
    console.print(Panel(
        f"[bold {score_style}]{feedback.first_impression_score}/10[/bold {score_style}]  "
        f"{feedback.first_impression_reason}",
        title=f"第一印象 · {feedback.reader_name}",
        border_style=score_style,
    ))
    console.print(Panel(Markdown(feedback.reading_feeling or "—"), title="阅读感受"))
    console.print(Panel(Markdown(feedback.revision_suggestions or "—"), title="修改建议"))


@click.group()
@click.option("--log-level", default="WARNING", show_default=True, help="Console log level")
@click.pass_context
def cli(ctx, log_level):
    """Simulated-reader feedback for PDF and Word documents."""
    setup_logging("cli", level=log_level, log_to_files=False)
    ctx.obj = LLMGateway(LLMSettings.from_env())


@cli.command()
@click.pass_obj
def providers(gateway: LLMGateway):
    """Show configured LLM providers."""
    info = get_available_providers(gateway.settings)

    table = Table(title="LLM providers")
    table.add_column("Provider")
    table.add_column("Model")
    table.add_column("Key")
    for entry in info["providers"]:
        marker = " ←" if entry["id"] == info["selected"] else ""
        table.add_row(
            f"{entry['name']}{marker}",
            entry["model"],
            "[green]✓[/green]" if entry["available"] else "[dim]—[/dim]",
        )
    console.print(table)

    if info["selected"] is None:
        console.print("[yellow]No provider configured: set DEEPSEEK_API_KEY, OPENAI_API_KEY or ANTHROPIC_API_KEY[/yellow]")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def analyze(gateway: LLMGateway, file):
    """Analyze FILE and suggest reader personas."""
    try:
        document = _load_document(file)
        with console.status("Analyzing..."):
            result = asyncio.run(gateway.analyze_document(document.text))
    except DocumentError as e:
        _fail(e.message, e.code)
    except LLMError as e:
        _fail(e.message, e.category.value)

    _print_analysis(result)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--reader", "-r", "reader_index", type=int, default=1, show_default=True,
              help="Suggested reader number (1-3)")
@click.option("--custom", "-c", "custom_name", default=None, help="Custom reader name")
@click.option("--description", "-d", default="", help="Custom reader description")
@click.pass_obj
def feedback(gateway: LLMGateway, file, reader_index: int, custom_name: Optional[str], description: str):
    """Get feedback on FILE from a suggested or custom reader."""
    try:
        document = _load_document(file)

        if custom_name:
            reader = SuggestedReader.custom(custom_name, description)
        else:
            with console.status("Analyzing..."):
                result = asyncio.run(gateway.analyze_document(document.text))
            readers = result.suggested_readers
            if not 1 <= reader_index <= len(readers):
                _fail(f"Reader #{reader_index} not available ({len(readers)} suggested)", "INVALID_READER")
            reader = readers[reader_index - 1]

        with console.status(f"Reading as {reader.name}..."):
            payload = asyncio.run(gateway.get_reader_feedback(
                document.text, reader.name, reader.description, reader.is_custom,
            ))
    except DocumentError as e:
        _fail(e.message, e.code)
    except LLMError as e:
        _fail(e.message, e.category.value)

    _print_feedback(ReaderFeedback.from_payload(reader, payload))


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: str, port: int, reload: bool):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("readerlens.web.server:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
