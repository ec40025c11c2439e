"""Merges resource fragments into one validated deployment template."""
from typing import Dict, Iterable, List, Optional, Sequence

from .errors import DanglingDependency, ParameterCollision, ParameterContractViolation, ResourceCollision, UndeclaredParameter
from .expressions import ResourceId, dependency_target, parameter_references, referenced_resources, resolves, resource_id_for
from .models import ArmParameterValue, ArmResourceTemplate, ParameterValueSet


class TemplateComposer:
    """Composes the fragments of several resource generators.

    ``merge`` only unions fragments, so partial results can be merged again
    later. ``compose`` merges and then checks that the result is
    self-contained: every parameter declared, every dependency present and
    the dependency graph acyclic.
    """

    def compose(self, fragments: Sequence[ArmResourceTemplate]) -> ArmResourceTemplate:
        """Merge fragments and validate the result.

        Args:
            fragments: Fragments in the order their resources should appear.

        Returns:
            ArmResourceTemplate: The composed deployment template.

        Raises:
            ParameterCollision: If fragments disagree on a parameter or variable.
            ResourceCollision: If two fragments declare the same resource.
            DanglingDependency: If a reference does not resolve.
        """
        template = self.merge(fragments)
        self.validate(template)
        return template

    def merge(self, fragments: Sequence[ArmResourceTemplate]) -> ArmResourceTemplate:
        merged = ArmResourceTemplate(source="+".join(fragment.source for fragment in fragments if fragment.source))
        parameter_sources: Dict[str, str] = {}
        variable_sources: Dict[str, str] = {}
        resource_sources: Dict[ResourceId, str] = {}

        for index, fragment in enumerate(fragments):
            source = fragment.source or f"fragment[{index}]"

            for name, param in fragment.parameters.items():
                existing = merged.parameters.get(name)
                if existing is None:
                    merged.parameters[name] = param
                    parameter_sources[name] = source
                elif existing != param:
                    raise ParameterCollision(name, parameter_sources[name], source, _describe_difference(existing, param))

            for name, value in fragment.variables.items():
                if name not in merged.variables:
                    merged.variables[name] = value
                    variable_sources[name] = source
                elif merged.variables[name] != value:
                    raise ParameterCollision(name, variable_sources[name], source, "variable values differ")

            for resource in fragment.resources:
                resource_id = resource_id_for(resource.type, resource.name)
                if resource_id in resource_sources:
                    raise ResourceCollision(str(resource_id), resource_sources[resource_id], source)
                resource_sources[resource_id] = source
                merged.resources.append(resource)

        return merged

    def validate(self, template: ArmResourceTemplate) -> None:
        """Check that the template only refers to things it declares."""
        declared = set(template.parameters)
        ids = [resource_id_for(resource.type, resource.name) for resource in template.resources]
        known = set(ids)

        for name in parameter_references(template.variables):
            if name not in declared:
                raise UndeclaredParameter("variables", name)

        edges: Dict[ResourceId, List[ResourceId]] = {}
        for resource, resource_id in zip(template.resources, ids):
            label = str(resource_id)
            for name in parameter_references(resource.to_dict()):
                if name not in declared:
                    raise UndeclaredParameter(label, name)

            dependencies = []
            for entry in resource.depends_on:
                target = dependency_target(entry)
                if target is None or not resolves(target, known):
                    raise DanglingDependency(label, entry)
                target = _resolve_id(target, ids)
                if target == resource_id:
                    raise DanglingDependency(label, entry, f"Resource '{label}' depends on itself")
                dependencies.append(target)

            references = referenced_resources([resource.properties, resource.sku])
            for target in references:
                if not resolves(target, known):
                    raise DanglingDependency(label, str(target))
                target = _resolve_id(target, ids)
                if target != resource_id and target not in dependencies:
                    raise DanglingDependency(
                        label,
                        str(target),
                        f"Resource '{label}' reads from '{target}' without declaring it in dependsOn",
                    )
            edges[resource_id] = dependencies

        _check_acyclic(edges)

    def compose_parameters(self, value_sets: Iterable[ParameterValueSet], template: ArmResourceTemplate,
                           sources: Optional[Sequence[str]] = None) -> ParameterValueSet:
        """Union generator value sets and check them against the composed template.

        Args:
            value_sets: Parameter values per fragment.
            template: The composed template.
            sources: Fragment name of each value set, used in error messages.

        Raises:
            ParameterCollision: If two value sets give one parameter different values.
            ParameterContractViolation: If a required parameter has no value or a
                value is given for a parameter the template does not declare.
        """
        merged: Dict[str, ArmParameterValue] = {}
        owners: Dict[str, str] = {}
        for index, values in enumerate(value_sets):
            source = sources[index] if sources else f"values[{index}]"
            for name, item in values.items():
                if name in merged and merged[name] != item:
                    raise ParameterCollision(name, owners[name], source, "supplied values differ")
                merged.setdefault(name, item)
                owners.setdefault(name, source)

        required = set(template.required_parameters())
        missing = required - set(merged)
        unexpected = set(merged) - set(template.parameters)
        if missing or unexpected:
            raise ParameterContractViolation(template.source or "template", missing, unexpected)

        # Template declaration order keeps the parameters file stable
        return {name: merged[name] for name in template.parameters if name in merged}


def _describe_difference(first, second) -> str:
    if first.type != second.type:
        return f"type {first.type.value} vs {second.type.value}"
    if first.default_value != second.default_value:
        return f"default {first.default_value!r} vs {second.default_value!r}"
    return "allowed values differ"


def _resolve_id(target: ResourceId, ids: List[ResourceId]) -> ResourceId:
    # Name-only references resolve to the first resource with that name
    if target.type:
        return target
    return next(candidate for candidate in ids if candidate.name == target.name)


def _check_acyclic(edges: Dict[ResourceId, List[ResourceId]]) -> None:
    visiting: List[ResourceId] = []
    done = set()

    def visit(node: ResourceId) -> None:
        if node in done:
            return
        if node in visiting:
            cycle = visiting[visiting.index(node):] + [node]
            raise DanglingDependency(
                str(node),
                str(cycle[1]),
                "Dependency cycle: " + " -> ".join(str(item) for item in cycle),
            )
        visiting.append(node)
        for target in edges.get(node, []):
            visit(target)
        visiting.pop()
        done.add(node)

    for node in edges:
        visit(node)
