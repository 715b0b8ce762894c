import json
import logging
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from typing_extensions import Annotated

from . import __version__
from .config import setup_logging
from .drawing import TreeImage
from .errors import PhyloPdfError
from .geometry import Size
from .parsers import import_tree, tree_to_json
from .settings import Settings, read_settings_file

logger = logging.getLogger(__name__)

app = typer.Typer(help="phylopdf: draw phylogenetic trees with time series and clades to PDF.",
                  pretty_exceptions_short=False)
console = Console()
err_console = Console(stderr=True)


def handle_error(e: Exception, context: str) -> None:
    """Print ``e`` on stderr and exit with code 1."""
    err_console.print(
        Panel(
            f"[red]Error during {context}:[/red]\n  {e}",
            title="Error",
            border_style="red",
        )
    )
    raise typer.Exit(code=1)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"phylopdf version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version and exit."),
    ] = None,
) -> None:
    pass


@app.command()
def draw(
    source: Annotated[str, typer.Argument(help="Newick or JSON tree (optionally .xz), - for stdin")],
    output: Annotated[str, typer.Argument(help="Output PDF, - for stdout")],
    ladderize: Annotated[bool, typer.Option("--ladderize", "-l", help="Ladderize the tree before drawing")] = False,
    fix_labels: Annotated[
        bool,
        typer.Option("--fix-labels", "--fix-human-in-labels", help="Remove /HUMAN/, (H3N2)/, (H1N1)/ from labels"),
    ] = False,
    clades: Annotated[bool, typer.Option("--clades", "--show-clades", help="Show clades")] = False,
    continents: Annotated[bool, typer.Option("--continents", help="Color code by continent")] = False,
    pos: Annotated[
        Optional[str],
        typer.Option("--pos", "--coloring-by-pos", help="Color code by amino acid at the given position"),
    ] = None,
    branch_ids: Annotated[bool, typer.Option("--branch-ids", "--show-branch-ids", help="Show branch ids")] = False,
    subtree_top_bottom: Annotated[
        bool,
        typer.Option("--subtree-top-bottom", "--show-subtree-top-bottom", help="Draw subtree top/bottom lines in the time series"),
    ] = False,
    number_strains_threshold: Annotated[
        Optional[int],
        typer.Option("--number-strains-threshold", help="Annotate branches with more strains than this"),
    ] = None,
    print_tree: Annotated[bool, typer.Option("--print-tree", "-p", help="Print the tree")] = False,
    print_edges: Annotated[bool, typer.Option("--print-edges", "--edges", help="Print edge length histogram")] = False,
    width: Annotated[float, typer.Option("--width", help="Canvas width in points")] = 72 * 8.5,
    height: Annotated[float, typer.Option("--height", help="Canvas height in points")] = 72 * 11.0,
    settings_file: Annotated[
        Optional[str],
        typer.Option("--settings", "-s", help="Settings JSON (bare object or tree JSON with _settings)"),
    ] = None,
    save_json: Annotated[
        Optional[str],
        typer.Option("--save-json", help="Write the tree with the computed settings to this JSON file (.xz compresses)"),
    ] = None,
    verbose: Annotated[int, typer.Option("--verbose", "-v", count=True, help="Increase verbosity")] = 0,
) -> None:
    """Draw SOURCE into the PDF OUTPUT."""
    setup_logging(verbose)
    # keep stdout clean when the PDF goes there
    out = sys.stderr if output == "-" else sys.stdout
    try:
        tree, settings = import_tree(source, Settings())
        if settings_file:
            read_settings_file(settings_file, settings)
        if fix_labels:
            tree.fix_labels()
        tree.analyse()
        if ladderize:
            tree.ladderize()
        if print_tree:
            tree.print(out)
        if print_edges:
            tree.print_edges(out)

        if clades:
            settings.clades.show = True
        if continents:
            settings.coloring.coloring = "continent"
        if pos:
            settings.coloring.coloring = "pos"
            settings.coloring.pos = pos
        if branch_ids:
            settings.tree.show_branch_ids = True
        if subtree_top_bottom:
            settings.time_series.show_subtree_top_bottom = True
        if number_strains_threshold is not None:
            settings.tree.number_strains_threshold = number_strains_threshold

        image = TreeImage(settings)
        image.make_pdf(output, tree, canvas_size=Size(width, height))
        computed = image.dump_to_json()
        if save_json:
            tree_to_json(tree, save_json, "phylopdf draw", computed=computed)
        else:
            logger.info("Computed values (can be inserted into source.json at \"_settings\" key):\n%s",
                        json.dumps(computed, indent=2))
    except PhyloPdfError as e:
        handle_error(e, "drawing")


@app.command()
def newick2json(
    source: Annotated[str, typer.Argument(help="Newick tree (optionally .xz), - for stdin")],
    output: Annotated[str, typer.Argument(help="Output JSON (.xz compresses), - for stdout")],
    print_tree: Annotated[bool, typer.Option("--print-tree", "-p", help="Print the tree")] = False,
    verbose: Annotated[int, typer.Option("--verbose", "-v", count=True, help="Increase verbosity")] = 0,
) -> None:
    """Convert a tree into the phylogenetic-tree-v1 JSON format."""
    setup_logging(verbose)
    try:
        tree, settings = import_tree(source, Settings())
        tree.analyse()
        if print_tree:
            tree.print(sys.stderr if output == "-" else sys.stdout)
        tree_to_json(tree, output, "newick2json", settings)
    except PhyloPdfError as e:
        handle_error(e, "conversion")


@app.command()
def diff(
    source1: Annotated[str, typer.Argument(help="First tree")],
    source2: Annotated[str, typer.Argument(help="Second tree")],
    verbose: Annotated[int, typer.Option("--verbose", "-v", count=True, help="Increase verbosity")] = 0,
) -> None:
    """Compare the topologies of two trees (Robinson-Foulds distance)."""
    from .interop import compare_trees

    setup_logging(verbose)
    try:
        tree1, _ = import_tree(source1)
        tree2, _ = import_tree(source2)
        result = compare_trees(tree1, tree2)
    except PhyloPdfError as e:
        handle_error(e, "comparison")
        return

    table = Table(title="Tree comparison", show_header=True)
    table.add_column("Measure", style="cyan")
    table.add_column("Value")
    for key, value in result.items():
        table.add_row(key, f"{value:.4g}" if isinstance(value, float) else str(value))
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
