"""Ordered registry of resource template generators."""
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..config.schema import ServerlessAzureConfig
from ..naming.service import NamingService
from .contract import ArmResourceTemplateGenerator
from .resources.api_management import ApiManagementResource
from .resources.app_insights import AppInsightsResource
from .resources.app_service_plan import AppServicePlanResource
from .resources.function_app import FunctionAppResource
from .resources.storage_account import StorageAccountResource


@dataclass(frozen=True)
class RegistryEntry:
    """One resource kind: how to build its generator and when it applies."""
    kind: str
    factory: Callable[[ServerlessAzureConfig, Optional[NamingService]], ArmResourceTemplateGenerator]
    applies: Callable[[ServerlessAzureConfig], bool] = lambda config: True


def _uses_app_service_plan(config: ServerlessAzureConfig) -> bool:
    return config.provider.app_service_plan is not None


DEFAULT_ENTRIES = (
    RegistryEntry(
        StorageAccountResource.kind,
        lambda config, naming: StorageAccountResource(naming),
    ),
    RegistryEntry(
        AppInsightsResource.kind,
        lambda config, naming: AppInsightsResource(naming),
    ),
    RegistryEntry(
        AppServicePlanResource.kind,
        lambda config, naming: AppServicePlanResource(naming),
        _uses_app_service_plan,
    ),
    RegistryEntry(
        FunctionAppResource.kind,
        lambda config, naming: FunctionAppResource(naming, use_app_service_plan=_uses_app_service_plan(config)),
    ),
    RegistryEntry(
        ApiManagementResource.kind,
        lambda config, naming: ApiManagementResource(naming),
        lambda config: config.provider.apim is not None,
    ),
)


class ResourceRegistry:
    """Explicit, ordered collection of the resource kinds a deployment can contain."""

    def __init__(self, entries=DEFAULT_ENTRIES):
        self.entries: List[RegistryEntry] = list(entries)
        kinds = [entry.kind for entry in self.entries]
        duplicates = sorted({kind for kind in kinds if kinds.count(kind) > 1})
        if duplicates:
            raise ValueError(f"Resource kinds registered more than once: {', '.join(duplicates)}")

    @property
    def kinds(self) -> List[str]:
        return [entry.kind for entry in self.entries]

    def for_config(self, config: ServerlessAzureConfig,
                   naming: Optional[NamingService] = None) -> List[ArmResourceTemplateGenerator]:
        """Generators that apply to ``config``, in registration order."""
        return [entry.factory(config, naming) for entry in self.entries if entry.applies(config)]
