"""
Pixelgrind CLI - Anti-Aliased Pixel Detection

Highlights anti-aliased pixels in an image and, given the same image rendered
without anti-aliasing, reports how well the detection matches.
"""

import logging
from pathlib import Path
from typing import Optional, Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

from pixelgrind.antialias import is_antialiased
from pixelgrind.codec import check_lossless, load_image, save_image, save_result
from pixelgrind.evaluation import evaluate, format_metric
from pixelgrind.image import DimensionMismatchError, get_pixel
from pixelgrind.neighborhood import scan_neighborhood

# Initialize Typer app and Rich console
app = typer.Typer(
    name="pixelgrind",
    help="🔍 [bold magenta]Pixelgrind[/] - Anti-Aliased Pixel Detection\n\n"
         "Find the pixels of an image that were produced by anti-aliasing.",
    rich_markup_mode="rich",
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_show_locals=False,
)

console = Console()
error_console = Console(stderr=True, style="bold red")

DEFAULT_OUT_DIR = Path("out")

# File names written under the output directory
DEFAULT_PATHS = {
    "output": "output.png",
    "overlay": "overlay.png",
    "differential": "differential.png",
    "ground_truth": "ground-truth.png",
    "result": "result.json",
}


def setup_logging(verbose: bool = False):
    """Route library logging through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=error_console, show_path=False, markup=False)],
        force=True,
    )


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        from pixelgrind import __version__
        console.print(Panel(
            f"[bold magenta]Pixelgrind[/] version [bold green]{__version__}[/]",
            title="Version Info",
            border_style="magenta",
        ))
        raise typer.Exit()


def validate_input_file(path: Path) -> Path:
    """Validate that an input image exists."""
    if not path.exists():
        error_console.print(f"❌ Input file not found: [yellow]{path}[/]")
        raise typer.Exit(1)
    if not path.is_file():
        error_console.print(f"❌ Not a file: [yellow]{path}[/]")
        raise typer.Exit(1)
    return path


def resolve_output_paths(
    out_dir: Path,
    output: Optional[Path] = None,
    overlay: Optional[Path] = None,
    differential: Optional[Path] = None,
    ground_truth: Optional[Path] = None,
    result: Optional[Path] = None,
) -> dict:
    """Fill in unset output paths with defaults under ``out_dir``."""
    given = {
        "output": output,
        "overlay": overlay,
        "differential": differential,
        "ground_truth": ground_truth,
        "result": result,
    }
    return {
        key: path if path is not None else out_dir / DEFAULT_PATHS[key]
        for key, path in given.items()
    }


def validate_output_paths(paths: dict, with_reference: bool) -> dict:
    """Check every raster path that will be written before anything is written."""
    names = ["output", "overlay"]
    if with_reference:
        names += ["differential", "ground_truth"]

    for name in names:
        try:
            check_lossless(paths[name])
        except ValueError as e:
            error_console.print(f"❌ Invalid {name} path: {e}")
            raise typer.Exit(1)
    return paths


def _load(path: Path, label: str):
    try:
        return load_image(path)
    except (OSError, ValueError) as e:
        error_console.print(f"❌ Could not load {label} [yellow]{path}[/]: {e}")
        raise typer.Exit(1)


def _show_results(result, paths: dict):
    counts = result.counts

    table = Table(title="🔍 Anti-Aliasing Detection", box=box.ROUNDED, border_style="magenta")
    table.add_column("Metric", style="magenta bold")
    table.add_column("Value", style="white", justify="right")

    table.add_row("Detected AA pixels", f"{counts.detected:,}")
    if result.has_reference:
        table.add_row("Expected AA pixels", f"{counts.expected:,}")
        table.add_row("True positives", f"{counts.true_positives:,}")
        table.add_row("False positives", f"{counts.false_positives:,}")
        table.add_row("False negatives", f"{counts.false_negatives:,}")
        table.add_row("Precision", format_metric(counts.precision))
        table.add_row("Recall", format_metric(counts.recall))
        table.add_row("F1", format_metric(counts.f1))
    table.add_row("Time", f"{result.elapsed * 1000:.1f} ms")

    console.print()
    console.print(table)

    console.print()
    for name, path in paths.items():
        console.print(f"  📄 {name}: [cyan]{path}[/]")


@app.command("detect", rich_help_panel="Commands")
def detect(
    image: Annotated[
        Path,
        typer.Argument(
            help="Path to a possibly anti-aliased image",
            show_default=False,
        )
    ],
    without_aa: Annotated[
        Optional[Path],
        typer.Option(
            "--without-aa", "-r",
            help="The same image rendered without anti-aliasing, used as ground truth",
        )
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="White image with detected pixels highlighted"),
    ] = None,
    overlay: Annotated[
        Optional[Path],
        typer.Option("--overlay", help="Original image with detected pixels highlighted"),
    ] = None,
    differential: Annotated[
        Optional[Path],
        typer.Option("--differential", help="False positives / false negatives image (needs --without-aa)"),
    ] = None,
    ground_truth: Annotated[
        Optional[Path],
        typer.Option("--ground-truth", help="Ground-truth anti-aliasing image (needs --without-aa)"),
    ] = None,
    result: Annotated[
        Optional[Path],
        typer.Option("--result", help="JSON summary of counts and metrics"),
    ] = None,
    out_dir: Annotated[
        Path,
        typer.Option("--out-dir", "-d", help="Directory for outputs without an explicit path"),
    ] = DEFAULT_OUT_DIR,
    workers: Annotated[
        Optional[int],
        typer.Option("--workers", "-w", min=1, help="Worker threads (default: CPU count)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only print errors"),
    ] = False,
):
    """
    🔍 Detect anti-aliased pixels in an image.

    [bold]Examples:[/]

      [dim]# Highlight anti-aliased pixels[/]
      $ pixelgrind detect image.png

      [dim]# Score against a rendering without anti-aliasing[/]
      $ pixelgrind detect image.png --without-aa image-noaa.png
    """
    setup_logging(verbose)

    validate_input_file(image)
    if without_aa is not None:
        validate_input_file(without_aa)

    paths = validate_output_paths(
        resolve_output_paths(out_dir, output, overlay, differential, ground_truth, result),
        with_reference=without_aa is not None,
    )

    img = _load(image, "image")
    reference = _load(without_aa, "reference") if without_aa is not None else None

    try:
        run = evaluate(img, reference, workers=workers)
    except DimensionMismatchError as e:
        error_console.print(f"❌ {e}")
        raise typer.Exit(1)

    written = {}
    try:
        for name, raster in run.rasters.items():
            written[name] = save_image(raster, paths[name])
    except (OSError, ValueError) as e:
        error_console.print(f"❌ Could not write {name}: {e}")
        raise typer.Exit(1)

    try:
        written["result"] = save_result(
            paths["result"],
            run.counts.to_dict(),
            image_path=image,
            reference_path=without_aa,
            elapsed=run.elapsed,
            outputs=dict(written),
        )
    except OSError as e:
        error_console.print(f"❌ Could not write result: {e}")
        raise typer.Exit(1)

    if not quiet:
        _show_results(run, written)


@app.command("pixel", rich_help_panel="Commands")
def pixel(
    image: Annotated[Path, typer.Argument(help="Path to image", show_default=False)],
    x: Annotated[int, typer.Argument(help="Pixel column", min=0, show_default=False)],
    y: Annotated[int, typer.Argument(help="Pixel row", min=0, show_default=False)],
):
    """
    🔬 Explain the decision for a single pixel.
    """
    validate_input_file(image)
    img = _load(image, "image")

    height, width = img.shape[:2]
    if x >= width or y >= height:
        error_console.print(f"❌ Pixel ({x}, {y}) is outside the {width}x{height} image")
        raise typer.Exit(1)

    hood = scan_neighborhood(img, x, y)
    verdict = is_antialiased(img, x, y)

    table = Table(box=box.ROUNDED, show_header=False, border_style="magenta")
    table.add_column("Property", style="bold")
    table.add_column("Value")

    table.add_row("Pixel", f"({x}, {y}) = {get_pixel(img, x, y)}")
    table.add_row("Equal siblings", str(hood.siblings))
    if hood.rejected:
        table.add_row("Flat region", "[yellow]yes, too many equal siblings[/]")
    else:
        if hood.min_delta != 0:
            table.add_row(
                "Brighter neighbour",
                f"{hood.min_pos} = {get_pixel(img, *hood.min_pos)}  (Δ {hood.min_delta:.3f})",
            )
        if hood.max_delta != 0:
            table.add_row(
                "Darker neighbour",
                f"{hood.max_pos} = {get_pixel(img, *hood.max_pos)}  (Δ {hood.max_delta:.3f})",
            )
    table.add_row(
        "Anti-aliased",
        "[green]✓ yes[/]" if verdict else "[red]✗ no[/]",
    )

    console.print(Panel(table, title=f"🔬 {image.name}", border_style="magenta"))


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version", "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        )
    ] = None,
):
    """
    🔍 [bold magenta]Pixelgrind[/] - Anti-Aliased Pixel Detection

    [bold]Quick Start:[/]

      [dim]# Highlight anti-aliased pixels (writes to out/)[/]
      $ pixelgrind detect image.png

      [dim]# Inspect one pixel[/]
      $ pixelgrind pixel image.png 12 40
    """
    if ctx.invoked_subcommand is None:
        pass


def run():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
