"""API Management ARM template generator."""
from typing import Optional

from ...config.schema import ApiManagementConfig, ServerlessAzureConfig
from ...naming.rules import API_MANAGEMENT_RULE
from ...naming.service import NamingOptions, NamingService, get_resource_name
from ..contract import location_parameter, location_value
from ..errors import ConfigMismatch
from ..models import ArmParameterValue, ArmParamType, ArmResource, ArmResourceTemplate, ArmTemplateParameter, ParameterValueSet

SERVICE_ID = "resourceId('Microsoft.ApiManagement/service', parameters('apiManagementName'))"
FUNCTION_APP_ID = "resourceId('Microsoft.Web/sites', parameters('functionAppName'))"


class ApiManagementResource:
    """Builds the ARM fragment for an API Management service.

    Besides the service itself the fragment declares a backend that routes
    to the function app's host, so it is only deployable together with the
    function app fragment.
    """

    kind = "apim"

    def __init__(self, naming: Optional[NamingService] = None):
        self.api_version = "2019-12-01"
        self.naming = naming

    @staticmethod
    def get_resource_name(config: ServerlessAzureConfig, naming: Optional[NamingService] = None) -> str:
        options = NamingOptions(
            config=config,
            resource_config=config.provider.apim,
            suffix=f"{config.service}-apim",
            rule=API_MANAGEMENT_RULE,
            kind=ApiManagementResource.kind,
        )
        return naming.get_resource_name(options) if naming else get_resource_name(options)

    def get_template(self) -> ArmResourceTemplate:
        parameters = {
            "apiManagementName": ArmTemplateParameter(type=ArmParamType.String),
            "apiManagementSkuName": ArmTemplateParameter(
                type=ArmParamType.String,
                allowed_values=["Consumption", "Developer", "Basic", "Standard", "Premium"],
            ),
            "apiManagementSkuCapacity": ArmTemplateParameter(type=ArmParamType.Int),
            "apiManagementPublisherEmail": ArmTemplateParameter(type=ArmParamType.String),
            "apiManagementPublisherName": ArmTemplateParameter(type=ArmParamType.String),
            "location": location_parameter(),
        }
        service = ArmResource(
            type="Microsoft.ApiManagement/service",
            api_version=self.api_version,
            name="[parameters('apiManagementName')]",
            location="[parameters('location')]",
            sku={
                "name": "[parameters('apiManagementSkuName')]",
                "capacity": "[parameters('apiManagementSkuCapacity')]",
            },
            identity={"type": ArmParamType.SystemAssigned.value},
            properties={
                "publisherEmail": "[parameters('apiManagementPublisherEmail')]",
                "publisherName": "[parameters('apiManagementPublisherName')]",
            },
        )
        backend = ArmResource(
            type="Microsoft.ApiManagement/service/backends",
            api_version=self.api_version,
            name="[concat(parameters('apiManagementName'), '/', parameters('functionAppName'))]",
            depends_on=[f"[{SERVICE_ID}]", f"[{FUNCTION_APP_ID}]"],
            properties={
                "description": "[parameters('functionAppName')]",
                "protocol": "http",
                "url": f"[concat('https://', reference({FUNCTION_APP_ID}).defaultHostName, '/api')]",
                "resourceId": f"[concat('https://management.azure.com', {FUNCTION_APP_ID})]",
            },
        )
        return ArmResourceTemplate(parameters=parameters, resources=[service, backend], source=self.kind)

    def get_parameters(self, config: ServerlessAzureConfig) -> ParameterValueSet:
        apim: Optional[ApiManagementConfig] = config.provider.apim
        if apim is None:
            raise ConfigMismatch(self.kind, "provider.apim")
        if not apim.publisher_email:
            raise ConfigMismatch(self.kind, "provider.apim.publisherEmail")

        return {
            "apiManagementName": ArmParameterValue(self.get_resource_name(config, self.naming)),
            "apiManagementSkuName": ArmParameterValue(apim.sku.name),
            "apiManagementSkuCapacity": ArmParameterValue(apim.capacity),
            "apiManagementPublisherEmail": ArmParameterValue(apim.publisher_email),
            "apiManagementPublisherName": ArmParameterValue(apim.publisher_name or config.service),
            **location_value(config),
        }
