"""Serverless ARM template generator CLI entrypoint."""
import typer
import yaml
from pathlib import Path
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typing import Optional

from armtemplates.arm.errors import TemplateGenerationError
from armtemplates.arm.generator import ArmTemplateGenerator
from armtemplates.config.parser import ConfigParser
from armtemplates.observability import RichParameterSink

app = typer.Typer(help="Serverless ARM templates - Azure deployment templates from service configuration")
console = Console()


def _load(config: str, region: Optional[str], stage: Optional[str]):
    return ConfigParser.load(config, overrides={"region": region, "stage": stage})


@app.command("generate")
def generate(
    config: str = typer.Option("serverless.yml", "--config", "-c", help="Path to the service configuration file"),
    output_dir: str = typer.Option(None, "--output-dir", "-o", help="Directory for the generated template files"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Override provider.region"),
    stage: Optional[str] = typer.Option(None, "--stage", "-s", help="Override provider.stage"),
    debug: bool = typer.Option(False, "--debug", help="Print verbose debug information including resolved parameters"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing template files")
):
    """Generate the ARM template and parameters file from the service configuration."""
    console.print("[bold blue]Generating ARM template...[/]")

    try:
        service_config = _load(config, region, stage)
        if not service_config.provider.region:
            console.print("[bold yellow]WARNING: No region specified, resources deploy to the resource group location. Set provider.region or pass --region.[/]")

        generator = ArmTemplateGenerator(
            service_config,
            output_dir or str(Path(config).parent),
            debug=debug,
            sink=RichParameterSink(console) if debug else None,
            console=console,
        )

        # Check for existing files and handle force option
        existing_files = [path for path in generator.output_paths() if path.exists()]
        if existing_files and not force:
            existing_files_str = ", ".join(str(f) for f in existing_files)
            console.print(f"[bold yellow]WARNING: Template files already exist: {existing_files_str}[/]")
            console.print("[yellow]Use --force to overwrite existing files.[/]")
            raise typer.Exit(code=1)

        template_path, params_path = generator.generate()

        console.print(f"[green]ARM template generated at {template_path}[/]")
        console.print(f"[green]Parameters file generated at {params_path}[/]")

        if debug:
            console.print("\n[bold blue]Generated ARM Template:[/]")
            console.print_json(Path(template_path).read_text())

    except (TemplateGenerationError, FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/]")
        raise typer.Exit(code=1)


@app.command("names")
def names(
    config: str = typer.Option("serverless.yml", "--config", "-c", help="Path to the service configuration file"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Override provider.region"),
    stage: Optional[str] = typer.Option(None, "--stage", "-s", help="Override provider.stage"),
):
    """Show the resource names derived from the service configuration."""
    try:
        generator = ArmTemplateGenerator(_load(config, region, stage), console=console)
        derived = generator.names()
    except (TemplateGenerationError, FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/]")
        raise typer.Exit(code=1)

    table = Table(title="Derived Resource Names")
    table.add_column("Resource kind", style="cyan")
    table.add_column("Name", style="green")
    for kind, name in derived.items():
        table.add_row(kind, name)
    console.print(table)


if __name__ == "__main__":
    app()
