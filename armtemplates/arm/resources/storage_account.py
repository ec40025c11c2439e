"""Storage Account ARM template generator."""
from typing import Optional

from ...config.schema import ServerlessAzureConfig
from ...naming.rules import STORAGE_ACCOUNT_RULE
from ...naming.service import NamingOptions, NamingService, get_resource_name
from ..contract import location_parameter, location_value
from ..models import ArmParameterValue, ArmParamType, ArmResource, ArmResourceTemplate, ArmTemplateParameter, ParameterValueSet


class StorageAccountResource:
    """Builds the ARM fragment for a Storage Account."""

    kind = "storageAccount"

    def __init__(self, naming: Optional[NamingService] = None):
        self.api_version = "2019-06-01"
        self.naming = naming

    @staticmethod
    def get_resource_name(config: ServerlessAzureConfig, naming: Optional[NamingService] = None) -> str:
        """Storage account names are global, so they always carry the config hash."""
        options = NamingOptions(
            config=config,
            resource_config=config.provider.storage_account,
            suffix=config.service,
            include_hash=True,
            rule=STORAGE_ACCOUNT_RULE,
            kind=StorageAccountResource.kind,
        )
        return naming.get_resource_name(options) if naming else get_resource_name(options)

    def get_template(self) -> ArmResourceTemplate:
        parameters = {
            "storageAccountName": ArmTemplateParameter(type=ArmParamType.String),
            "storageAccountSkuName": ArmTemplateParameter(type=ArmParamType.String),
            "storageAccountMinTlsVersion": ArmTemplateParameter(type=ArmParamType.String, default_value="TLS1_2"),
            "location": location_parameter(),
        }
        resource = ArmResource(
            type="Microsoft.Storage/storageAccounts",
            api_version=self.api_version,
            name="[parameters('storageAccountName')]",
            location="[parameters('location')]",
            kind="StorageV2",
            sku={"name": "[parameters('storageAccountSkuName')]"},
            properties={
                "supportsHttpsTrafficOnly": True,
                "minimumTlsVersion": "[parameters('storageAccountMinTlsVersion')]",
            },
        )
        return ArmResourceTemplate(parameters=parameters, resources=[resource], source=self.kind)

    def get_parameters(self, config: ServerlessAzureConfig) -> ParameterValueSet:
        return {
            "storageAccountName": ArmParameterValue(self.get_resource_name(config, self.naming)),
            "storageAccountSkuName": ArmParameterValue(config.provider.storage_account.sku.name),
            **location_value(config),
        }
