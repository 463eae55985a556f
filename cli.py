"""
Document Analyst CLI - Command line interface for testing and utilities.

Usage:
    python cli.py parse <file_path>
    python cli.py prompt <file_path> [--message TEXT]
    python cli.py analyze [<file_path>] [--message TEXT] [--model MODEL]
"""

import asyncio
import argparse
import mimetypes
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markdown import Markdown
from rich.text import Text

from docanalyst.config import Config
from docanalyst.extraction import ParsingError, format_file_size, parse_document
from docanalyst.analysis import (
    AnalysisRequestError,
    DocumentAnalyst,
    UploadedFile,
    generate_analysis_prompt,
)
from docanalyst.utils.llm_client import LLMClientError

console = Console()


def load_upload(path_str: str) -> UploadedFile:
    """Read a file from disk as an upload, exiting if it does not exist."""
    file_path = Path(path_str)

    if not file_path.exists():
        console.print(f"[red]Error:[/red] File not found: {file_path}")
        sys.exit(1)

    content_type, _ = mimetypes.guess_type(file_path.name)
    return UploadedFile.from_bytes(file_path.name, file_path.read_bytes(), content_type or "")


def parse_or_exit(upload: UploadedFile):
    """Parse an upload, printing the error and exiting on failure."""
    try:
        return parse_document(upload.descriptor, upload.content)
    except ParsingError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def cmd_parse(args):
    """Show the normalized content and metadata of a document."""
    upload = load_upload(args.file_path)

    console.print(f"[cyan]Parsing:[/cyan] {upload.descriptor.name}")
    doc = parse_or_exit(upload)

    metadata_table = Table(title="Document Metadata", show_header=False)
    metadata_table.add_column("Field", style="cyan")
    metadata_table.add_column("Value", style="green")

    for key, value in doc.metadata.to_dict().items():
        if key == "file_size":
            value = format_file_size(value)
        elif key == "sheet_names":
            value = ", ".join(value)
        metadata_table.add_row(key.replace("_", " ").title(), str(value))

    console.print(metadata_table)
    console.print(Panel(Text(doc.content), title="Content", border_style="blue"))


def cmd_prompt(args):
    """Print the analysis prompt for a document."""
    upload = load_upload(args.file_path)
    doc = parse_or_exit(upload)

    console.print(generate_analysis_prompt(doc, args.message), markup=False, highlight=False)


async def async_analyze(upload: UploadedFile | None, message: str | None, model: str | None):
    """Async analysis logic."""
    if upload is not None:
        console.print(
            f"[cyan]Analyzing:[/cyan] {upload.descriptor.name} "
            f"({format_file_size(upload.descriptor.size)})"
        )

    analyst = DocumentAnalyst(model=model)
    try:
        with console.status("Waiting for the model..."):
            result = await analyst.analyze(message, upload)
    finally:
        await analyst.close()

    console.print()
    console.print(Panel(Markdown(result.response), title="Analysis", border_style="green"))


def cmd_analyze(args):
    """Answer a question about a document with the LLM."""
    # Validate API key
    config_issues = Config.validate()
    if config_issues:
        console.print("[red]Configuration Error:[/red]")
        for issue in config_issues:
            console.print(f"  - {issue}")
        console.print("\nPlease set up your .env file with required API keys.")
        sys.exit(1)

    upload = load_upload(args.file_path) if args.file_path else None

    try:
        asyncio.run(async_analyze(upload, args.message, args.model))
    except (AnalysisRequestError, ParsingError, LLMClientError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Document Analyst CLI - AI analysis of PDF, CSV and Excel files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Parse command
    parse_parser = subparsers.add_parser("parse", help="Show extracted content and metadata")
    parse_parser.add_argument("file_path", help="Path to a PDF, CSV or Excel file")

    # Prompt command
    prompt_parser = subparsers.add_parser("prompt", help="Print the analysis prompt for a file")
    prompt_parser.add_argument("file_path", help="Path to a PDF, CSV or Excel file")
    prompt_parser.add_argument("--message", "-m", help="Question to ask about the document")

    # Analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Analyze a document with the LLM")
    analyze_parser.add_argument("file_path", nargs="?", help="Path to a PDF, CSV or Excel file")
    analyze_parser.add_argument("--message", "-m", help="Question to ask about the document")
    analyze_parser.add_argument("--model", help="Model identifier (defaults to DEFAULT_ANALYSIS_MODEL)")

    args = parser.parse_args()

    Config.setup_logging(args.log_level)

    if args.command == "parse":
        cmd_parse(args)
    elif args.command == "prompt":
        cmd_prompt(args)
    elif args.command == "analyze":
        cmd_analyze(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
