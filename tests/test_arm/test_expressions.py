"""Tests for ARM expression helpers."""
import pytest

from armtemplates.arm.expressions import (
    ResourceId,
    dependency_target,
    parameter_references,
    referenced_resources,
    resource_id_for,
    split_arguments,
)

STORAGE = ResourceId("microsoft.storage/storageaccounts", ("parameters('storageaccountname')",))


def test_parameter_references():
    """Test collecting parameter names from nested values."""
    value = {
        "a": "[parameters('first')]",
        "b": ["[concat(parameters('second'), '-', parameters('first'))]"],
        "c": "parameters('notAnExpression')",
        "d": "[[parameters('escaped')]",
    }
    assert parameter_references(value) == ["first", "second"]


def test_split_arguments_respects_nesting_and_quotes():
    """Test top-level argument splitting."""
    args = split_arguments("'a,b', concat('x', parameters('y')), 'it''s'")
    assert args == ["'a,b'", "concat('x', parameters('y'))", "'it''s'"]


@pytest.mark.parametrize("entry", [
    "[resourceId('Microsoft.Storage/storageAccounts', parameters('storageAccountName'))]",
    "[resourceId('microsoft.storage/storageAccounts',parameters('storageAccountName'))]",
    "[concat('Microsoft.Storage/storageAccounts/', parameters('storageAccountName'))]",
])
def test_dependency_forms_resolve_to_same_id(entry):
    """Test that equivalent dependsOn spellings normalize identically."""
    assert dependency_target(entry) == STORAGE
    assert resource_id_for("Microsoft.Storage/storageAccounts", "[parameters('storageAccountName')]") == STORAGE


def test_literal_dependency_targets():
    """Test literal resource ids and bare names."""
    assert dependency_target("Microsoft.Web/sites/myapp") == resource_id_for("Microsoft.Web/sites", "myapp")
    assert dependency_target("myapp") == ResourceId("", ("'myapp'",))


def test_nested_resource_names():
    """Test child resources named with concat(parent, '/', child)."""
    declared = resource_id_for(
        "Microsoft.ApiManagement/service/backends",
        "[concat(parameters('apiManagementName'), '/', parameters('functionAppName'))]",
    )
    target = dependency_target(
        "[resourceId('Microsoft.ApiManagement/service/backends', parameters('apiManagementName'), parameters('functionAppName'))]"
    )
    assert declared == target


def test_referenced_resources():
    """Test finding lookups inside property values."""
    value = {
        "storage": "[listKeys(resourceId('Microsoft.Storage/storageAccounts', parameters('storageAccountName')), '2016-01-01').keys[0].value]",
        "insights": "[reference(concat('microsoft.insights/components/', parameters('appInsightsName'))).InstrumentationKey]",
        "plain": "resourceId('Microsoft.Web/sites', 'x')",
    }
    assert referenced_resources(value) == [
        STORAGE,
        ResourceId("microsoft.insights/components", ("parameters('appinsightsname')",)),
    ]


def test_child_name_with_slash_inside_literal():
    """Test child resources named with concat(parent, '/child')."""
    declared = resource_id_for(
        "Microsoft.ApiManagement/service/backends",
        "[concat(parameters('a'), '/backend')]",
    )
    target = dependency_target(
        "[resourceId('Microsoft.ApiManagement/service/backends', parameters('a'), 'backend')]"
    )
    assert declared == target
    assert declared.name == ("parameters('a')", "'backend'")
    assert resource_id_for("Microsoft.Foo/bar/baz", "[concat(parameters('a'), '/x/', parameters('b'))]").name == (
        "parameters('a')", "'x'", "parameters('b')",
    )
