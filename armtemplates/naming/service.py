"""Derives deterministic, platform-legal Azure resource names."""
import hashlib
import re
from dataclasses import dataclass
from typing import Dict, Optional

from ..arm.errors import NamingConstraintViolation
from ..config.schema import ResourceConfig, ServerlessAzureConfig
from .rules import FUNCTION_APP_RULE, NamingRule, short_region_name, short_stage_name

HASH_LENGTH = 6


@dataclass(frozen=True)
class NamingOptions:
    """Inputs to name derivation.

    Attributes:
        config: Service configuration the name belongs to.
        suffix: Disambiguator appended after the prefix, region and stage.
        resource_config: Per-resource override block; an explicit ``name``
            in it is used verbatim.
        include_hash: Append a short hash of the config identity.
        rule: Naming constraints of the target resource type.
        kind: Resource kind, used in error messages.
    """
    config: ServerlessAzureConfig
    suffix: str = ""
    resource_config: Optional[ResourceConfig] = None
    include_hash: bool = False
    rule: NamingRule = FUNCTION_APP_RULE
    kind: str = "resource"


def config_hash(config: ServerlessAzureConfig) -> str:
    """Short hash of service, stage, region and prefix."""
    provider = config.provider
    identity = "|".join([config.service, provider.stage, provider.region or "", provider.prefix])
    return hashlib.sha256(identity.encode("utf-8")).hexdigest()[:HASH_LENGTH]


def sanitize(value: str, rule: NamingRule) -> str:
    """Replace characters the rule does not allow and tidy separators."""
    value = re.sub(r"\s+", "-", value.strip())
    if rule.lowercase:
        value = value.lower()
    separator = rule.separator
    value = re.sub(f"[^{rule.allowed}]", separator, value)
    if separator:
        value = re.sub(f"{re.escape(separator)}+", separator, value).strip(separator)
    return value


def get_resource_name(options: NamingOptions) -> str:
    """Derive the name of a resource.

    The derivable body is truncated from the right when the name would
    exceed the rule's length; the hash suffix is never cut.

    Args:
        options: Naming inputs.

    Returns:
        str: The resource name.

    Raises:
        NamingConstraintViolation: If no legal name can be produced.
    """
    if options.resource_config is not None and options.resource_config.name:
        return options.resource_config.name

    provider = options.config.provider
    rule = options.rule
    parts = [
        provider.prefix,
        short_region_name(provider.region),
        short_stage_name(provider.stage),
        options.suffix,
    ]
    body = sanitize(rule.separator.join(part for part in parts if part), rule)

    if not options.include_hash:
        name = body[:rule.max_length].rstrip(rule.separator or "-")
        return _checked(options, name)

    digest = config_hash(options.config)
    room = rule.max_length - len(rule.separator) - len(digest)
    if room < 1:
        raise NamingConstraintViolation(
            options.kind,
            f"{body}{rule.separator}{digest}",
            f"hash suffix leaves no room within {rule.max_length} characters",
        )
    body = body[:room]
    if rule.separator:
        body = body.rstrip(rule.separator)
    name = f"{body}{rule.separator}{digest}" if body else digest
    return _checked(options, name)


def _checked(options: NamingOptions, name: str) -> str:
    rule = options.rule
    if not rule.min_length <= len(name) <= rule.max_length:
        raise NamingConstraintViolation(
            options.kind, name, f"length must be between {rule.min_length} and {rule.max_length}"
        )
    if not rule.pattern.match(name):
        raise NamingConstraintViolation(options.kind, name, "contains characters the resource type does not allow")
    return name


class NamingService:
    """Memoizes derived names for one generation run."""

    def __init__(self):
        self._names: Dict[NamingOptions, str] = {}

    def get_resource_name(self, options: NamingOptions) -> str:
        if options not in self._names:
            self._names[options] = get_resource_name(options)
        return self._names[options]
