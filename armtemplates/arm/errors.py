"""Errors raised while generating ARM deployment templates."""


class TemplateGenerationError(Exception):
    """Base class for all generation failures."""


class ConfigMismatch(TemplateGenerationError):
    """A generator could not resolve a parameter from the configuration."""

    def __init__(self, kind: str, field: str, message: str = None):
        self.kind = kind
        self.field = field
        super().__init__(message or f"{kind}: required configuration field '{field}' is missing")


class ParameterContractViolation(ConfigMismatch):
    """A parameter value set does not match the declared parameters."""

    def __init__(self, kind: str, missing=(), unexpected=()):
        self.missing = sorted(missing)
        self.unexpected = sorted(unexpected)
        details = []
        if self.missing:
            details.append(f"missing values for {', '.join(self.missing)}")
        if self.unexpected:
            details.append(f"values for undeclared parameters {', '.join(self.unexpected)}")
        super().__init__(
            kind,
            (self.missing or self.unexpected)[0],
            f"{kind}: parameter values do not match the template ({'; '.join(details)})",
        )


class ParameterCollision(TemplateGenerationError):
    """Two fragments disagree on a shared parameter or variable."""

    def __init__(self, name: str, first: str, second: str, reason: str = "incompatible declarations"):
        self.name = name
        self.first = first
        self.second = second
        super().__init__(f"Parameter '{name}' collides between '{first}' and '{second}': {reason}")


class DanglingDependency(TemplateGenerationError):
    """A resource refers to something that is not part of the template."""

    def __init__(self, resource: str, reference: str, message: str = None):
        self.resource = resource
        self.reference = reference
        super().__init__(message or f"Resource '{resource}' depends on '{reference}', which is not in the template")


class UndeclaredParameter(DanglingDependency):
    """An expression uses parameters('x') but no fragment declares x."""

    def __init__(self, resource: str, parameter: str):
        super().__init__(
            resource,
            parameter,
            f"'{resource}' references parameter '{parameter}', which no fragment declares",
        )


class ResourceCollision(TemplateGenerationError):
    """Two fragments declare a resource with the same id."""

    def __init__(self, resource_id: str, first: str, second: str):
        self.resource_id = resource_id
        self.first = first
        self.second = second
        super().__init__(f"Resource '{resource_id}' is declared by both '{first}' and '{second}'")


class NamingConstraintViolation(TemplateGenerationError):
    """A derived name cannot satisfy the resource type's naming rules."""

    def __init__(self, kind: str, name: str, reason: str):
        self.kind = kind
        self.name = name
        self.reason = reason
        super().__init__(f"{kind}: derived name '{name}' is invalid ({reason})")
