"""CloudFormation intrinsic function helpers."""

from typing import Any


def ref(logical_id: str) -> dict[str, Any]:
    """Return a Ref to a resource or pseudo parameter."""
    return {"Ref": logical_id}


def get_att(logical_id: str, attribute: str) -> dict[str, Any]:
    """Return an Fn::GetAtt for a resource attribute."""
    return {"Fn::GetAtt": [logical_id, attribute]}


def sub(template: str) -> dict[str, Any]:
    """Return an Fn::Sub over pseudo parameters."""
    return {"Fn::Sub": template}


def join(delimiter: str, values: list[Any]) -> dict[str, Any]:
    return {"Fn::Join": [delimiter, values]}


def select(index: int, values: Any) -> dict[str, Any]:
    return {"Fn::Select": [index, values]}


def get_azs(region: str = "") -> dict[str, Any]:
    """Return the availability zones of the region (current region when empty)."""
    return {"Fn::GetAZs": region}


def cidr(ip_block: Any, count: int, cidr_bits: int) -> dict[str, Any]:
    """Return an Fn::Cidr carving ``count`` blocks of ``cidr_bits`` host bits."""
    return {"Fn::Cidr": [ip_block, count, str(cidr_bits)]}
