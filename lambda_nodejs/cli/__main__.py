#!/usr/bin/env python3
"""Main CLI entry point for Node.js Lambda utilities."""

import logging
import sys
from pathlib import Path

import click
from troposphere import Template

from ..config import ConfigurationError, load_function_config
from ..constructs.nodejs_function import NodejsFunctionConstruct
from ..lambda_utils.bundling import PrebuiltArtifactBundler
from ..lambda_utils.entry import find_entry


@click.group()
@click.version_option(package_name="lambda-nodejs")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Node.js Lambda function utilities."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command("resolve-entry")
@click.argument("construct_id")
@click.option("--entry", "-e", help="Explicit entry file (.ts, .js, .mjs or .tsx)")
@click.option(
    "--defining-file",
    "-d",
    required=True,
    type=click.Path(dir_okay=False),
    help="File the function is defined in; handlers are discovered next to it",
)
def resolve_entry_command(construct_id: str, entry: str, defining_file: str) -> None:
    """Print the absolute handler entry file for CONSTRUCT_ID."""
    try:
        path = find_entry(construct_id, entry=entry, defining_file=defining_file)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(str(path))


@cli.command()
@click.option("--config", "-c", "config_path", required=True, type=click.Path(dir_okay=False), help="Function configuration YAML")
@click.option("--id", "construct_id", required=True, help="Function construct id")
@click.option("--bucket", "-b", required=True, help="S3 bucket of the prebuilt artifact")
@click.option("--key", "-k", required=True, help="S3 key of the prebuilt artifact")
@click.option("--environment", "-e", default="dev", help="Environment (dev/staging/prod)")
@click.option(
    "--defining-file",
    "-d",
    type=click.Path(dir_okay=False),
    help="File handlers are discovered next to (defaults to the config file)",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the template to a file")
def synth(config_path, construct_id, bucket, key, environment, defining_file, output):
    """Synthesize a CloudFormation template for a Node.js function."""
    try:
        config = load_function_config(config_path)
        template = Template()
        template.set_description(f"Node.js Lambda function {construct_id} ({environment})")

        NodejsFunctionConstruct(
            template,
            construct_id,
            config,
            PrebuiltArtifactBundler(bucket, key),
            environment=environment,
            defining_file=defining_file or config_path,
        )
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    rendered = template.to_json()
    if output:
        Path(output).write_text(rendered)
        click.echo(f"✅ Template written to {output}")
    else:
        click.echo(rendered)


main = cli


if __name__ == "__main__":
    cli()
