"""App Service Plan ARM template generator."""
from typing import Optional

from ...config.schema import AppServicePlanConfig, ServerlessAzureConfig
from ...naming.rules import APP_SERVICE_PLAN_RULE
from ...naming.service import NamingOptions, NamingService, get_resource_name
from ..contract import location_parameter, location_value
from ..errors import ConfigMismatch
from ..models import ArmParameterValue, ArmParamType, ArmResource, ArmResourceTemplate, ArmTemplateParameter, ParameterValueSet


class AppServicePlanResource:
    """Builds the ARM fragment for a premium or dedicated App Service Plan.

    The plan's ``reserved`` flag follows the function app's, so this fragment
    is only deployable together with the function app fragment.
    """

    kind = "appServicePlan"

    def __init__(self, naming: Optional[NamingService] = None):
        self.api_version = "2018-02-01"
        self.naming = naming

    @staticmethod
    def get_resource_name(config: ServerlessAzureConfig, naming: Optional[NamingService] = None) -> str:
        options = NamingOptions(
            config=config,
            resource_config=config.provider.app_service_plan,
            suffix=f"{config.service}-asp",
            rule=APP_SERVICE_PLAN_RULE,
            kind=AppServicePlanResource.kind,
        )
        return naming.get_resource_name(options) if naming else get_resource_name(options)

    def get_template(self) -> ArmResourceTemplate:
        parameters = {
            "appServicePlanName": ArmTemplateParameter(type=ArmParamType.String),
            "appServicePlanSkuName": ArmTemplateParameter(type=ArmParamType.String),
            "appServicePlanSkuTier": ArmTemplateParameter(type=ArmParamType.String),
            "appServicePlanWorkerCount": ArmTemplateParameter(type=ArmParamType.Int),
            "location": location_parameter(),
        }
        resource = ArmResource(
            type="Microsoft.Web/serverfarms",
            api_version=self.api_version,
            name="[parameters('appServicePlanName')]",
            location="[parameters('location')]",
            sku={
                "name": "[parameters('appServicePlanSkuName')]",
                "tier": "[parameters('appServicePlanSkuTier')]",
            },
            properties={
                "name": "[parameters('appServicePlanName')]",
                "maximumElasticWorkerCount": "[parameters('appServicePlanWorkerCount')]",
                "reserved": "[parameters('functionAppReserved')]",
            },
        )
        return ArmResourceTemplate(parameters=parameters, resources=[resource], source=self.kind)

    def get_parameters(self, config: ServerlessAzureConfig) -> ParameterValueSet:
        plan: Optional[AppServicePlanConfig] = config.provider.app_service_plan
        if plan is None:
            raise ConfigMismatch(self.kind, "provider.appServicePlan")
        if not plan.sku.tier:
            raise ConfigMismatch(self.kind, "provider.appServicePlan.sku.tier")

        return {
            "appServicePlanName": ArmParameterValue(self.get_resource_name(config, self.naming)),
            "appServicePlanSkuName": ArmParameterValue(plan.sku.name),
            "appServicePlanSkuTier": ArmParameterValue(plan.sku.tier),
            "appServicePlanWorkerCount": ArmParameterValue(plan.worker_count),
            **location_value(config),
        }
