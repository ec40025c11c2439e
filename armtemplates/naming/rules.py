"""Azure naming constraints and short codes used when deriving names."""
import re
from dataclasses import dataclass


@dataclass(frozen=True)
class NamingRule:
    """Length and character-set constraints for one resource type.

    ``allowed`` is a character class of legal characters, ``pattern`` the
    full-name check applied after derivation. A rule with an empty separator
    forbids hyphens entirely.
    """
    max_length: int
    min_length: int = 1
    allowed: str = "a-zA-Z0-9-"
    pattern: re.Pattern = re.compile(r"^[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?$")
    lowercase: bool = False
    separator: str = "-"


# https://learn.microsoft.com/azure/azure-resource-manager/management/resource-name-rules
FUNCTION_APP_RULE = NamingRule(max_length=60)
APP_SERVICE_PLAN_RULE = NamingRule(max_length=40)
APP_INSIGHTS_RULE = NamingRule(
    max_length=255,
    allowed=r"a-zA-Z0-9\-_.()",
    pattern=re.compile(r"^[a-zA-Z0-9\-_.()]*[a-zA-Z0-9\-_()]$"),
)
STORAGE_ACCOUNT_RULE = NamingRule(
    max_length=24,
    min_length=3,
    allowed="a-z0-9",
    pattern=re.compile(r"^[a-z0-9]+$"),
    lowercase=True,
    separator="",
)
API_MANAGEMENT_RULE = NamingRule(
    max_length=50,
    pattern=re.compile(r"^[a-zA-Z](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?$"),
)

REGION_SHORT_CODES = {
    "eastus": "eus",
    "eastus2": "eus2",
    "westus": "wus",
    "westus2": "wus2",
    "westus3": "wus3",
    "centralus": "cus",
    "northcentralus": "ncus",
    "southcentralus": "scus",
    "westcentralus": "wcus",
    "canadacentral": "cac",
    "canadaeast": "cae",
    "brazilsouth": "brs",
    "northeurope": "neu",
    "westeurope": "weu",
    "uksouth": "uks",
    "ukwest": "ukw",
    "francecentral": "frc",
    "germanywestcentral": "gwc",
    "norwayeast": "noe",
    "swedencentral": "sec",
    "switzerlandnorth": "szn",
    "australiaeast": "aue",
    "australiasoutheast": "ause",
    "eastasia": "ea",
    "southeastasia": "sea",
    "japaneast": "jpe",
    "japanwest": "jpw",
    "koreacentral": "krc",
    "centralindia": "inc",
    "southindia": "ins",
    "southafricanorth": "san",
    "uaenorth": "uan",
}

# Fallback for regions missing from the table
_REGION_WORDS = (
    ("north", "n"),
    ("south", "s"),
    ("east", "e"),
    ("west", "w"),
    ("central", "c"),
)

STAGE_SHORT_CODES = {
    "dev": "d",
    "development": "d",
    "test": "t",
    "testing": "t",
    "qa": "q",
    "stage": "s",
    "staging": "s",
    "uat": "u",
    "prod": "p",
    "production": "p",
}


def short_region_name(region: str) -> str:
    """Short code for an Azure region ("West US 2" -> "wus2")."""
    key = "".join((region or "").lower().split())
    if key in REGION_SHORT_CODES:
        return REGION_SHORT_CODES[key]
    for word, code in _REGION_WORDS:
        key = key.replace(word, code)
    return key


def short_stage_name(stage: str) -> str:
    """Short code for a deployment stage ("prod" -> "p")."""
    key = "".join((stage or "").lower().split())
    return STAGE_SHORT_CODES.get(key, key[:3])
