"""ARM deployment template generator."""
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from jinja2 import Environment, FileSystemLoader
from rich.console import Console

from ..config.parser import ConfigParser
from ..config.schema import ServerlessAzureConfig
from ..naming.service import NamingService
from .composer import TemplateComposer
from .contract import ParameterSink, resolve_parameters
from .models import CONTENT_VERSION, DEPLOYMENT_PARAMETERS_SCHEMA, ArmResourceTemplate, ParameterValueSet
from .registry import ResourceRegistry

TEMPLATE_FILE = "azuredeploy.json"
PARAMETERS_FILE = "azuredeploy.parameters.json"


class ArmTemplateGenerator:
    """Generates an ARM deployment template and parameters file from service configuration."""

    def __init__(self, config: Union[str, ServerlessAzureConfig], output_dir: str = None, debug: bool = False,
                 sink: Optional[ParameterSink] = None, registry: Optional[ResourceRegistry] = None,
                 secret_names: Iterable[str] = (), console: Optional[Console] = None):
        """Initialize the generator.

        Args:
            config: Path to the YAML configuration file, or a loaded configuration.
            output_dir: Directory for generated files. Defaults to the
                configuration file's directory, or the working directory.
            debug: If True, print verbose debug information.
            sink: Receives the redacted parameter values of every resource kind.
            registry: Resource kinds to generate. Defaults to all known kinds.
            secret_names: Parameter names whose values must never reach the sink.
            console: Console for debug output.
        """
        if isinstance(config, ServerlessAzureConfig):
            self.config_path = None
            self.config = config
        else:
            self.config_path = config
            self.config = ConfigParser.load(config)
        default_dir = Path(self.config_path).parent if self.config_path else Path.cwd()
        self.output_dir = Path(output_dir) if output_dir else default_dir
        self.debug = debug
        self.sink = sink
        self.registry = registry or ResourceRegistry()
        self.secret_names = tuple(secret_names)
        self.console = console or Console(stderr=True)
        self.composer = TemplateComposer()

        template_dir = Path(__file__).parent / "templates"
        self.jinja_env = Environment(
            loader=FileSystemLoader(template_dir),
            trim_blocks=True,
            lstrip_blocks=True
        )
        self.jinja_env.filters["json"] = json.dumps

    def build(self) -> Tuple[ArmResourceTemplate, ParameterValueSet]:
        """Build the composed template and its parameter values.

        Every resource kind is resolved before composition, so a failure in
        any of them aborts the whole run.

        Returns:
            Tuple[ArmResourceTemplate, ParameterValueSet]: Template and values.
        """
        naming = NamingService()
        generators = self.registry.for_config(self.config, naming)
        if self.debug:
            self.console.print(f"Debug: Resource kinds: {', '.join(g.kind for g in generators)}")

        fragments = []
        value_sets = []
        for generator in generators:
            fragment = generator.get_template()
            values = resolve_parameters(
                generator,
                self.config,
                sink=self.sink,
                secret_names=self.secret_names,
                template=fragment,
            )
            fragments.append(fragment)
            value_sets.append(values)
            if self.debug:
                self.console.print(
                    f"Debug: Generated {len(fragment.resources)} resource(s) for {generator.kind}"
                )

        template = self.composer.compose(fragments)
        parameters = self.composer.compose_parameters(
            value_sets, template, sources=[fragment.source for fragment in fragments]
        )
        return template, parameters

    def names(self) -> Dict[str, str]:
        """Derived resource name per resource kind."""
        naming = NamingService()
        return {
            generator.kind: generator.get_resource_name(self.config, naming)
            for generator in self.registry.for_config(self.config, naming)
        }

    def render_template(self, template: ArmResourceTemplate) -> str:
        return json.dumps(template.to_dict(), indent=2) + "\n"

    def render_parameters(self, parameters: ParameterValueSet) -> str:
        template = self.jinja_env.get_template("parameters.json.j2")
        return template.render(
            schema=DEPLOYMENT_PARAMETERS_SCHEMA,
            content_version=CONTENT_VERSION,
            parameters=parameters,
        ) + "\n"

    def output_paths(self) -> List[Path]:
        return [self.output_dir / TEMPLATE_FILE, self.output_dir / PARAMETERS_FILE]

    def generate(self) -> Tuple[str, str]:
        """Generate the template and parameters files.

        Returns:
            Tuple[str, str]: Paths to the generated template and parameters files.
        """
        if self.debug:
            source = self.config_path or "in-memory configuration"
            self.console.print(f"Debug: Generating ARM template from {source}")
            self.console.print(f"Debug: Output directory: {self.output_dir}")

        # Nothing is written unless the whole template composes
        template, parameters = self.build()
        template_content = self.render_template(template)
        parameters_content = self.render_parameters(parameters)

        self.output_dir.mkdir(parents=True, exist_ok=True)
        template_path, params_path = self.output_paths()
        template_path.write_text(template_content)
        params_path.write_text(parameters_content)

        if self.debug:
            self.console.print(f"Debug: Template written to {template_path}")
            self.console.print(f"Debug: Parameters file written to {params_path}")

        return str(template_path), str(params_path)

    def to_dicts(self) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Template and parameters documents as plain dicts."""
        template, parameters = self.build()
        return template.to_dict(), json.loads(self.render_parameters(parameters))
