from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from .config import load_config
from .errors import InlinerError
from .pipeline import CSSInliner
from .rules import AttributePolicy


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        stream=sys.stderr,
    )


@click.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--output", "-o", type=click.File("w", encoding="utf-8"), default="-", help="Write result here (default: stdout)")
@click.option("--critical", is_flag=True, help="Gather stylesheets into one <style> element instead of inlining")
@click.option("--directory", "-d", type=click.Path(file_okay=False), help="Resolve local stylesheets from this directory")
@click.option("--base-url", help="Resolve stylesheets relative to this URL")
@click.option(
    "--attribute-policy",
    type=click.Choice([policy.value for policy in AttributePolicy], case_sensitive=False),
    help="How to treat attribute selectors",
)
@click.option("--importantize", is_flag=True, help="Mark preserved rules !important")
@click.option("--handlebars", is_flag=True, help="Protect Handlebars tags")
@click.option("--less", is_flag=True, help="Compile linked .less stylesheets")
@click.option("--config", "-c", "config_path", type=click.Path(dir_okay=False), help="JSON config file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(source, output, critical, directory, base_url, attribute_policy, importantize, handlebars, less, config_path, verbose):
    """Inline the CSS of an HTML document (SOURCE, default stdin)."""
    setup_logging(verbose)
    try:
        config = load_config(Path(config_path) if config_path else None).merged(
            {
                "directory": directory,
                "base_url": base_url,
                "attribute_policy": attribute_policy,
                "importantize_preserved": importantize or None,
                "handlebars": handlebars or None,
                "critical": critical or None,
                "less": less or None,
            }
        )
        inliner = CSSInliner.from_config(config)
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc

    html = source.read()
    try:
        result = inliner.critical(html) if config.critical else inliner.inline(html)
    except InlinerError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    output.write(result)


def run() -> None:
    """Entry point for the css-inliner command."""
    cli()


if __name__ == "__main__":
    run()
