"""Tests for template composition."""
import itertools

import pytest

from armtemplates.arm.composer import TemplateComposer
from armtemplates.arm.errors import (
    DanglingDependency,
    ParameterCollision,
    ParameterContractViolation,
    ResourceCollision,
    UndeclaredParameter,
)
from armtemplates.arm.models import (
    DEPLOYMENT_TEMPLATE_SCHEMA,
    ArmParameterValue,
    ArmParamType,
    ArmResource,
    ArmResourceTemplate,
    ArmTemplateParameter,
)
from armtemplates.arm.resources.app_insights import AppInsightsResource
from armtemplates.arm.resources.function_app import FunctionAppResource
from armtemplates.arm.resources.storage_account import StorageAccountResource


def fragment(source, resource_type, param, depends_on=(), properties=None, extra_params=None):
    """Single-resource fragment named after one parameter."""
    parameters = {param: ArmTemplateParameter(type=ArmParamType.String)}
    parameters.update(extra_params or {})
    return ArmResourceTemplate(
        parameters=parameters,
        resources=[ArmResource(
            type=resource_type,
            api_version="2020-01-01",
            name=f"[parameters('{param}')]",
            depends_on=list(depends_on),
            properties=properties,
        )],
        source=source,
    )


def function_app_fragments():
    return [
        StorageAccountResource().get_template(),
        AppInsightsResource().get_template(),
        FunctionAppResource().get_template(),
    ]


def test_compose_function_app_stack():
    """Test composing the default resource kinds."""
    template = TemplateComposer().compose(function_app_fragments())
    document = template.to_dict()

    assert document["$schema"] == DEPLOYMENT_TEMPLATE_SCHEMA
    assert document["contentVersion"] == "1.0.0.0"
    assert [r["type"] for r in document["resources"]] == [
        "Microsoft.Storage/storageAccounts",
        "microsoft.insights/components",
        "Microsoft.Web/sites",
    ]
    # location is declared by every fragment but appears once
    assert list(document["parameters"]).count("location") == 1
    assert template.source == "storageAccount+appInsights+functionApp"


def test_composition_is_order_independent():
    """Test that validity does not depend on fragment order while output keeps input order."""
    composer = TemplateComposer()
    for permutation in itertools.permutations(function_app_fragments()):
        template = composer.compose(list(permutation))
        assert [r.type for r in template.resources] == [f.resources[0].type for f in permutation]


def test_merge_is_associative():
    """Test composing a partial merge with the remaining fragment."""
    composer = TemplateComposer()
    storage, insights, function_app = function_app_fragments()

    nested = composer.compose([composer.merge([storage, insights]), function_app])
    flat = composer.compose([storage, insights, function_app])
    assert nested.to_dict() == flat.to_dict()


def test_missing_storage_is_dangling():
    """Test that a function app without its storage account is rejected."""
    fragments = [AppInsightsResource().get_template(), FunctionAppResource().get_template()]
    with pytest.raises(DanglingDependency):
        TemplateComposer().compose(fragments)


def test_dangling_depends_on():
    """Test a dependsOn entry pointing at a resource that is not in the set."""
    consumer = fragment(
        "consumer",
        "Microsoft.Foo/consumers",
        "consumerName",
        depends_on=["[resourceId('Microsoft.Foo/producers', parameters('producerName'))]"],
        extra_params={"producerName": ArmTemplateParameter(type=ArmParamType.String, default_value="p")},
    )
    with pytest.raises(DanglingDependency) as exc_info:
        TemplateComposer().compose([consumer])
    assert type(exc_info.value) is DanglingDependency
    assert "producerName" in exc_info.value.reference


def test_dependency_closure_succeeds():
    """Test that the same consumer composes once the producer is present."""
    consumer = fragment(
        "consumer",
        "Microsoft.Foo/consumers",
        "consumerName",
        depends_on=["[resourceId('Microsoft.Foo/producers', parameters('producerName'))]"],
    )
    producer = fragment("producer", "Microsoft.Foo/producers", "producerName")
    template = TemplateComposer().compose([consumer, producer])
    assert len(template.resources) == 2


def test_child_resource_named_with_slash_literal():
    """Test that a child named concat(parent, '/child') satisfies a resourceId dependency."""
    parent = fragment("parent", "Microsoft.ApiManagement/service", "a")
    child = ArmResourceTemplate(
        resources=[ArmResource(
            type="Microsoft.ApiManagement/service/backends",
            api_version="2020-01-01",
            name="[concat(parameters('a'), '/backend')]",
            depends_on=["[resourceId('Microsoft.ApiManagement/service', parameters('a'))]"],
        )],
        source="child",
    )
    site = fragment(
        "site",
        "Microsoft.Web/sites",
        "siteName",
        depends_on=["[resourceId('Microsoft.ApiManagement/service/backends', parameters('a'), 'backend')]"],
    )
    template = TemplateComposer().compose([parent, child, site])
    assert len(template.resources) == 3


def test_undeclared_parameter():
    """Test that every referenced parameter must be declared somewhere."""
    with pytest.raises(UndeclaredParameter) as exc_info:
        TemplateComposer().compose([FunctionAppResource().get_template()])
    assert exc_info.value.reference in ("storageAccountName", "appInsightsName")


def test_reference_without_depends_on():
    """Test that reading another resource requires a dependsOn edge."""
    producer = fragment("producer", "Microsoft.Foo/producers", "producerName")
    consumer = fragment(
        "consumer",
        "Microsoft.Foo/consumers",
        "consumerName",
        properties={"key": "[listKeys(resourceId('Microsoft.Foo/producers', parameters('producerName')), '2020-01-01').key1]"},
    )
    with pytest.raises(DanglingDependency) as exc_info:
        TemplateComposer().compose([producer, consumer])
    assert "dependsOn" in str(exc_info.value)


def test_dependency_cycle():
    """Test that cyclic dependsOn edges are rejected."""
    first = fragment(
        "first", "Microsoft.Foo/a", "aName",
        depends_on=["[resourceId('Microsoft.Foo/b', parameters('bName'))]"],
    )
    second = fragment(
        "second", "Microsoft.Foo/b", "bName",
        depends_on=["[resourceId('Microsoft.Foo/a', parameters('aName'))]"],
    )
    with pytest.raises(DanglingDependency) as exc_info:
        TemplateComposer().compose([first, second])
    assert "cycle" in str(exc_info.value)


def test_parameter_collision_names_both_fragments():
    """Test incompatible declarations of a shared parameter."""
    first = fragment("first", "Microsoft.Foo/a", "aName",
                     extra_params={"location": ArmTemplateParameter(type=ArmParamType.String)})
    second = fragment("second", "Microsoft.Foo/b", "bName",
                      extra_params={"location": ArmTemplateParameter(type=ArmParamType.String, default_value="westus")})
    with pytest.raises(ParameterCollision) as exc_info:
        TemplateComposer().compose([first, second])
    assert exc_info.value.name == "location"
    assert (exc_info.value.first, exc_info.value.second) == ("first", "second")


def test_variable_collision():
    """Test that conflicting variables are rejected."""
    first = ArmResourceTemplate(variables={"suffix": "a"}, source="first")
    second = ArmResourceTemplate(variables={"suffix": "b"}, source="second")
    with pytest.raises(ParameterCollision):
        TemplateComposer().merge([first, second])


def test_resource_collision():
    """Test that two fragments cannot declare the same resource."""
    with pytest.raises(ResourceCollision):
        TemplateComposer().compose([
            StorageAccountResource().get_template(),
            StorageAccountResource().get_template(),
        ])


def test_compose_parameters():
    """Test merging value sets against the composed template."""
    composer = TemplateComposer()
    template = composer.compose([
        fragment("a", "Microsoft.Foo/a", "aName", extra_params={"location": ArmTemplateParameter(type=ArmParamType.String)}),
        fragment("b", "Microsoft.Foo/b", "bName", extra_params={"location": ArmTemplateParameter(type=ArmParamType.String)}),
    ])

    values = composer.compose_parameters([
        {"aName": ArmParameterValue("a1"), "location": ArmParameterValue("westus")},
        {"bName": ArmParameterValue("b1"), "location": ArmParameterValue("westus")},
    ], template)
    assert list(values) == ["aName", "location", "bName"]

    with pytest.raises(ParameterCollision) as exc_info:
        composer.compose_parameters([
            {"aName": ArmParameterValue("a1"), "location": ArmParameterValue("westus")},
            {"bName": ArmParameterValue("b1"), "location": ArmParameterValue("eastus")},
        ], template, sources=["a", "b"])
    assert exc_info.value.name == "location"
    assert (exc_info.value.first, exc_info.value.second) == ("a", "b")

    with pytest.raises(ParameterContractViolation) as exc_info:
        composer.compose_parameters([{"aName": ArmParameterValue("a1")}], template)
    assert exc_info.value.missing == ["bName", "location"]
