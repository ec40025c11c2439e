"""The contract every resource template generator fulfils."""
from typing import Any, Callable, Dict, Iterable, Optional, Protocol

from ..config.schema import ServerlessAzureConfig
from ..naming.service import NamingService
from .errors import ParameterContractViolation
from .models import ArmParameterValue, ArmParamType, ArmResourceTemplate, ArmTemplateParameter, ParameterValueSet

ParameterSink = Callable[[str, Dict[str, Any]], None]

REDACTED = "***"

# Deploy next to the resource group unless a region is configured
DEFAULT_LOCATION = "[resourceGroup().location]"


class ArmResourceTemplateGenerator(Protocol):
    """Produces one resource kind's template fragment and its parameter values."""

    kind: str

    @staticmethod
    def get_resource_name(config: ServerlessAzureConfig, naming: Optional[NamingService] = None) -> str:
        ...

    def get_template(self) -> ArmResourceTemplate:
        ...

    def get_parameters(self, config: ServerlessAzureConfig) -> ParameterValueSet:
        ...


def location_parameter() -> ArmTemplateParameter:
    return ArmTemplateParameter(type=ArmParamType.String, default_value=DEFAULT_LOCATION)


def location_value(config: ServerlessAzureConfig) -> ParameterValueSet:
    """The ``location`` value when a region is configured, else nothing."""
    if not config.provider.region:
        return {}
    return {"location": ArmParameterValue(config.provider.region)}


def redact(values: ParameterValueSet, template: ArmResourceTemplate,
           secret_names: Iterable[str] = ()) -> Dict[str, Any]:
    """Plain dict of parameter values with secure and named secret values masked."""
    secret = set(secret_names)
    secret.update(
        name for name, param in template.parameters.items()
        if param.type == ArmParamType.SecureString
    )
    return {
        name: {"value": REDACTED if name in secret else item.value}
        for name, item in values.items()
    }


def resolve_parameters(generator: ArmResourceTemplateGenerator, config: ServerlessAzureConfig,
                       sink: Optional[ParameterSink] = None, secret_names: Iterable[str] = (),
                       template: Optional[ArmResourceTemplate] = None) -> ParameterValueSet:
    """Resolve a generator's parameter values and check them against its fragment.

    Every parameter without a default must get a value. A defaulted
    parameter may be given one to override its default; a parameter the
    fragment does not declare may not.

    Args:
        generator: Generator to resolve.
        config: Service configuration.
        sink: Optional observer that receives a redacted copy of the values.
        secret_names: Extra parameter names whose values must not reach the sink.
        template: The generator's fragment, if already built.

    Returns:
        ParameterValueSet: Values for the fragment's parameters.

    Raises:
        ConfigMismatch: If the configuration lacks a needed field.
        ParameterContractViolation: If a required parameter has no value or
            a value names an undeclared parameter.
    """
    template = template or generator.get_template()
    values = generator.get_parameters(config)

    supplied = set(values)
    missing = set(template.required_parameters()) - supplied
    unexpected = supplied - set(template.parameters)
    if missing or unexpected:
        raise ParameterContractViolation(generator.kind, missing, unexpected)

    if sink is not None:
        sink(generator.kind, redact(values, template, secret_names))
    return values
