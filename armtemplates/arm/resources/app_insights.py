"""Application Insights ARM template generator."""
from typing import Optional

from ...config.schema import ServerlessAzureConfig
from ...naming.rules import APP_INSIGHTS_RULE
from ...naming.service import NamingOptions, NamingService, get_resource_name
from ..contract import location_parameter, location_value
from ..models import ArmParameterValue, ArmParamType, ArmResource, ArmResourceTemplate, ArmTemplateParameter, ParameterValueSet


class AppInsightsResource:
    """Builds the ARM fragment for an Application Insights component."""

    kind = "appInsights"

    def __init__(self, naming: Optional[NamingService] = None):
        self.api_version = "2015-05-01"
        self.naming = naming

    @staticmethod
    def get_resource_name(config: ServerlessAzureConfig, naming: Optional[NamingService] = None) -> str:
        options = NamingOptions(
            config=config,
            resource_config=config.provider.app_insights,
            suffix=f"{config.service}-appinsights",
            rule=APP_INSIGHTS_RULE,
            kind=AppInsightsResource.kind,
        )
        return naming.get_resource_name(options) if naming else get_resource_name(options)

    def get_template(self) -> ArmResourceTemplate:
        parameters = {
            "appInsightsName": ArmTemplateParameter(type=ArmParamType.String),
            "location": location_parameter(),
        }
        resource = ArmResource(
            type="microsoft.insights/components",
            api_version=self.api_version,
            name="[parameters('appInsightsName')]",
            location="[parameters('location')]",
            kind="web",
            properties={
                "Application_Type": "web",
                "Request_Source": "rest",
            },
        )
        return ArmResourceTemplate(parameters=parameters, resources=[resource], source=self.kind)

    def get_parameters(self, config: ServerlessAzureConfig) -> ParameterValueSet:
        return {
            "appInsightsName": ArmParameterValue(self.get_resource_name(config, self.naming)),
            **location_value(config),
        }
