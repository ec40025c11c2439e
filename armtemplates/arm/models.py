"""Shared data models for ARM template generation."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

DEPLOYMENT_TEMPLATE_SCHEMA = "https://schema.management.azure.com/schemas/2015-01-01/deploymentTemplate.json#"
DEPLOYMENT_PARAMETERS_SCHEMA = "https://schema.management.azure.com/schemas/2015-01-01/deploymentParameters.json#"
CONTENT_VERSION = "1.0.0.0"


class ArmParamType(str, Enum):
    """ARM parameter types, plus the managed identity marker."""
    String = "String"
    SecureString = "SecureString"
    Bool = "Bool"
    Int = "Int"
    Object = "Object"
    Array = "Array"
    SystemAssigned = "SystemAssigned"


@dataclass
class ArmTemplateParameter:
    """ARM parameter definition.

    A parameter without a default value is required: the generator that
    declares it must supply a value from the configuration.
    """
    type: ArmParamType
    default_value: Optional[Union[str, int, bool, Dict, List]] = None
    allowed_values: Optional[List[Union[str, int]]] = None

    @property
    def required(self) -> bool:
        return self.default_value is None

    def to_dict(self) -> Dict[str, Any]:
        result = {"type": self.type.value}
        if self.default_value is not None:
            result["defaultValue"] = self.default_value
        if self.allowed_values is not None:
            result["allowedValues"] = list(self.allowed_values)
        return result


@dataclass
class ArmResource:
    """ARM resource declaration."""
    type: str
    api_version: str
    name: str
    location: Optional[str] = None
    kind: Optional[str] = None
    sku: Optional[Dict[str, Any]] = None
    identity: Optional[Dict[str, str]] = None
    depends_on: List[str] = field(default_factory=list)
    properties: Optional[Dict[str, Any]] = None
    tags: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "type": self.type,
            "apiVersion": self.api_version,
            "name": self.name,
        }
        optional = (
            ("location", self.location),
            ("kind", self.kind),
            ("sku", self.sku),
            ("identity", self.identity),
            ("tags", self.tags),
        )
        for key, value in optional:
            if value is not None:
                result[key] = value
        result["dependsOn"] = list(self.depends_on)
        if self.properties is not None:
            result["properties"] = self.properties
        return result


@dataclass
class ArmParameterValue:
    """Concrete value for one template parameter."""
    value: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value}


ParameterValueSet = Dict[str, ArmParameterValue]


@dataclass
class ArmResourceTemplate:
    """A deployment template, or the fragment one generator contributes to it."""
    parameters: Dict[str, ArmTemplateParameter] = field(default_factory=dict)
    variables: Dict[str, Any] = field(default_factory=dict)
    resources: List[ArmResource] = field(default_factory=list)
    schema: str = DEPLOYMENT_TEMPLATE_SCHEMA
    content_version: str = CONTENT_VERSION
    source: str = ""

    def required_parameters(self) -> List[str]:
        """Names of the parameters that have no default value."""
        return [name for name, param in self.parameters.items() if param.required]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "$schema": self.schema,
            "contentVersion": self.content_version,
            "parameters": {name: param.to_dict() for name, param in self.parameters.items()},
            "variables": dict(self.variables),
            "resources": [resource.to_dict() for resource in self.resources],
        }
