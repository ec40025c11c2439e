"""Pydantic models for serverless service configuration."""
import re
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class FunctionAppOS(str, Enum):
    """Operating system a function app runs on."""
    WINDOWS = "windows"
    LINUX = "linux"


class SupportedRuntimeLanguage(str, Enum):
    """Function runtime languages."""
    NODE = "node"
    PYTHON = "python"


class ConfigModel(BaseModel):
    """Base for all config blocks: immutable, accepts names or camelCase aliases."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class FunctionRuntime(ConfigModel):
    """Runtime language and version."""
    language: SupportedRuntimeLanguage
    version: str


class ResourceConfig(ConfigModel):
    """Per-resource override block."""
    name: Optional[str] = None


class SkuConfig(ConfigModel):
    """Resource SKU."""
    name: str
    tier: Optional[str] = None


class FunctionAppConfig(ResourceConfig):
    """Function app overrides."""
    extension_version: str = Field(default="~3", alias="extensionVersion")


class StorageAccountConfig(ResourceConfig):
    """Storage account overrides."""
    sku: SkuConfig = SkuConfig(name="Standard_LRS")


class AppServicePlanConfig(ResourceConfig):
    """App service plan; configuring one moves the function app off the consumption plan."""
    sku: SkuConfig = SkuConfig(name="EP1", tier="ElasticPremium")
    worker_count: int = Field(default=1, alias="workerCount")


class ApiManagementConfig(ResourceConfig):
    """API Management front door for the function app."""
    sku: SkuConfig = SkuConfig(name="Consumption")
    capacity: int = 0
    publisher_email: Optional[str] = Field(default=None, alias="publisherEmail")
    publisher_name: Optional[str] = Field(default=None, alias="publisherName")


# nodejs12, nodejs12.x, python3.8
_RUNTIME_PATTERN = re.compile(r"^(nodejs|python)(\d+(?:\.\d+)?)(?:\.x)?$")
_RUNTIME_LANGUAGES = {
    "nodejs": SupportedRuntimeLanguage.NODE,
    "python": SupportedRuntimeLanguage.PYTHON,
}


class ProviderConfig(ConfigModel):
    """Provider section of the service configuration."""
    name: str = "azure"
    region: Optional[str] = Field(default=None, validation_alias=AliasChoices("region", "location"))
    stage: str = "dev"
    prefix: str = "sls"
    os: FunctionAppOS = FunctionAppOS.WINDOWS
    runtime: Optional[str] = None
    function_runtime: Optional[FunctionRuntime] = Field(default=None, alias="functionRuntime")
    function_app: FunctionAppConfig = Field(default_factory=FunctionAppConfig, alias="functionApp")
    storage_account: StorageAccountConfig = Field(default_factory=StorageAccountConfig, alias="storageAccount")
    app_insights: ResourceConfig = Field(default_factory=ResourceConfig, alias="appInsights")
    app_service_plan: Optional[AppServicePlanConfig] = Field(default=None, alias="appServicePlan")
    apim: Optional[ApiManagementConfig] = None

    @model_validator(mode="before")
    @classmethod
    def derive_function_runtime(cls, data):
        """Fill ``functionRuntime`` from the ``runtime`` shorthand when only the latter is set."""
        if not isinstance(data, dict):
            return data
        runtime = data.get("runtime")
        if not runtime or data.get("functionRuntime") or data.get("function_runtime"):
            return data
        match = _RUNTIME_PATTERN.match(str(runtime).strip().lower())
        if not match:
            raise ValueError(f"Unsupported runtime '{runtime}'")
        return {
            **data,
            "functionRuntime": {
                "language": _RUNTIME_LANGUAGES[match.group(1)],
                "version": match.group(2),
            },
        }

    @property
    def location(self) -> Optional[str]:
        return self.region


class ServerlessAzureConfig(ConfigModel):
    """Root service configuration."""
    service: str
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
