"""Function App ARM template generator."""
from typing import Optional

from ...config.schema import FunctionAppOS, ServerlessAzureConfig, SupportedRuntimeLanguage
from ...naming.rules import FUNCTION_APP_RULE
from ...naming.service import NamingOptions, NamingService, get_resource_name
from ..contract import location_parameter, location_value
from ..errors import ConfigMismatch
from ..models import ArmParameterValue, ArmParamType, ArmResource, ArmResourceTemplate, ArmTemplateParameter, ParameterValueSet

STORAGE_ACCOUNT_ID = "resourceId('Microsoft.Storage/storageAccounts', parameters('storageAccountName'))"
APP_INSIGHTS_ID = "concat('microsoft.insights/components/', parameters('appInsightsName'))"
APP_SERVICE_PLAN_ID = "resourceId('Microsoft.Web/serverfarms', parameters('appServicePlanName'))"

# Storage keys are looked up by the deployment, never written into the template
STORAGE_CONNECTION_STRING = (
    "[concat('DefaultEndpointsProtocol=https;AccountName=',parameters('storageAccountName'),"
    f"';AccountKey=',listKeys({STORAGE_ACCOUNT_ID}, '2016-01-01').keys[0].value)]"
)


class FunctionAppResource:
    """Builds the ARM fragment for a Function App."""

    kind = "functionApp"

    def __init__(self, naming: Optional[NamingService] = None, use_app_service_plan: bool = False):
        """Initialize the generator.

        Args:
            naming: Naming service shared by one generation run.
            use_app_service_plan: Host the app on the app service plan
                fragment instead of the consumption plan.
        """
        self.api_version = "2016-03-01"
        self.naming = naming
        self.use_app_service_plan = use_app_service_plan

    @staticmethod
    def get_resource_name(config: ServerlessAzureConfig, naming: Optional[NamingService] = None) -> str:
        safe_service_name = "-".join(config.service.split())
        options = NamingOptions(
            config=config,
            resource_config=config.provider.function_app,
            suffix=safe_service_name,
            include_hash=False,
            rule=FUNCTION_APP_RULE,
            kind=FunctionAppResource.kind,
        )
        return naming.get_resource_name(options) if naming else get_resource_name(options)

    def get_template(self) -> ArmResourceTemplate:
        parameters = {
            "functionAppRunFromPackage": ArmTemplateParameter(type=ArmParamType.String, default_value="1"),
            "functionAppName": ArmTemplateParameter(type=ArmParamType.String),
            "functionAppNodeVersion": ArmTemplateParameter(type=ArmParamType.String),
            "functionAppWorkerRuntime": ArmTemplateParameter(
                type=ArmParamType.String,
                allowed_values=[language.value for language in SupportedRuntimeLanguage],
            ),
            "functionAppExtensionVersion": ArmTemplateParameter(type=ArmParamType.String),
            "functionAppKind": ArmTemplateParameter(type=ArmParamType.String),
            "functionAppReserved": ArmTemplateParameter(type=ArmParamType.Bool),
            "location": location_parameter(),
        }

        depends_on = [f"[{STORAGE_ACCOUNT_ID}]", f"[{APP_INSIGHTS_ID}]"]
        properties = {
            "siteConfig": {
                "appSettings": [
                    {"name": "FUNCTIONS_WORKER_RUNTIME", "value": "[parameters('functionAppWorkerRuntime')]"},
                    {"name": "FUNCTIONS_EXTENSION_VERSION", "value": "[parameters('functionAppExtensionVersion')]"},
                    {"name": "AzureWebJobsStorage", "value": STORAGE_CONNECTION_STRING},
                    {"name": "WEBSITE_CONTENTAZUREFILECONNECTIONSTRING", "value": STORAGE_CONNECTION_STRING},
                    {"name": "WEBSITE_CONTENTSHARE", "value": "[toLower(parameters('functionAppName'))]"},
                    {"name": "WEBSITE_NODE_DEFAULT_VERSION", "value": "[parameters('functionAppNodeVersion')]"},
                    {"name": "WEBSITE_RUN_FROM_PACKAGE", "value": "[parameters('functionAppRunFromPackage')]"},
                    {
                        "name": "APPINSIGHTS_INSTRUMENTATIONKEY",
                        "value": f"[reference({APP_INSIGHTS_ID}).InstrumentationKey]",
                    },
                ]
            },
            "reserved": "[parameters('functionAppReserved')]",
            "name": "[parameters('functionAppName')]",
            "clientAffinityEnabled": False,
            "hostingEnvironment": "",
        }

        # Premium and dedicated hosting
        if self.use_app_service_plan:
            depends_on.append(f"[{APP_SERVICE_PLAN_ID}]")
            properties["serverFarmId"] = f"[{APP_SERVICE_PLAN_ID}]"

        resource = ArmResource(
            type="Microsoft.Web/sites",
            api_version=self.api_version,
            name="[parameters('functionAppName')]",
            location="[parameters('location')]",
            kind="[parameters('functionAppKind')]",
            identity={"type": ArmParamType.SystemAssigned.value},
            depends_on=depends_on,
            properties=properties,
        )
        return ArmResourceTemplate(parameters=parameters, resources=[resource], source=self.kind)

    def get_parameters(self, config: ServerlessAzureConfig) -> ParameterValueSet:
        function_runtime = config.provider.function_runtime
        if function_runtime is None:
            raise ConfigMismatch(self.kind, "provider.functionRuntime")
        is_linux = config.provider.os == FunctionAppOS.LINUX

        return {
            "functionAppName": ArmParameterValue(self.get_resource_name(config, self.naming)),
            "functionAppNodeVersion": ArmParameterValue(
                function_runtime.version
                if function_runtime.language == SupportedRuntimeLanguage.NODE
                else ""
            ),
            "functionAppWorkerRuntime": ArmParameterValue(function_runtime.language.value),
            "functionAppExtensionVersion": ArmParameterValue(config.provider.function_app.extension_version),
            "functionAppKind": ArmParameterValue("functionapp,linux" if is_linux else "functionapp"),
            "functionAppReserved": ArmParameterValue(is_linux),
            **location_value(config),
        }
