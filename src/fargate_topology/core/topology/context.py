"""The topology context threaded through every assembly step."""

import json
from collections.abc import Iterator
from typing import Any, TypeVar

from fargate_topology.core.topology.resources import Resource, TopologyError

TEMPLATE_FORMAT_VERSION = "2010-09-09"

R = TypeVar("R", bound=Resource)


class TopologyContext:
    """Accumulates the resource graph for one stack and renders its template."""

    def __init__(
        self,
        stack_name: str,
        description: str = "",
        tags: dict[str, str] | None = None,
    ) -> None:
        self.stack_name = stack_name
        self.description = description
        self.tags = dict(tags or {})
        self._resources: dict[str, Resource] = {}
        self._outputs: dict[str, dict[str, Any]] = {}

    def add(self, resource: R) -> R:
        """Register a resource; logical ids are unique within the stack."""
        logical_id = resource.logical_id
        if logical_id in self._resources:
            raise TopologyError(f"Duplicate logical id {logical_id} (scope {resource.scope}).")
        self._resources[logical_id] = resource
        return resource

    def get(self, logical_id: str) -> Resource:
        try:
            return self._resources[logical_id]
        except KeyError as exc:
            raise TopologyError(f"No resource with logical id {logical_id}.") from exc

    @property
    def resources(self) -> list[Resource]:
        return list(self._resources.values())

    def walk(self, scope: str) -> Iterator[Resource]:
        """Yield every resource declared at or below a scope path, in declaration order."""
        prefix = f"{scope}/"
        for resource in list(self._resources.values()):
            if resource.scope == scope or resource.scope.startswith(prefix):
                yield resource

    def add_output(self, name: str, value: Any, description: str | None = None) -> None:
        output: dict[str, Any] = {"Value": value}
        if description:
            output["Description"] = description
        self._outputs[name] = output

    def to_template(self) -> dict[str, Any]:
        """Render the full CloudFormation template."""
        template: dict[str, Any] = {"AWSTemplateFormatVersion": TEMPLATE_FORMAT_VERSION}
        if self.description:
            template["Description"] = self.description
        template["Resources"] = {
            logical_id: resource.render(self.tags)
            for logical_id, resource in self._resources.items()
        }
        if self._outputs:
            template["Outputs"] = {name: dict(output) for name, output in self._outputs.items()}
        return template

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_template(), indent=indent, sort_keys=False)
