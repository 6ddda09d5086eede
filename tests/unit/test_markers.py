"""Tests for declarative field markers and payload helpers."""

from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import BaseModel, Field

from iplb_provisioner.resources.frontend import TcpFrontendResource
from iplb_provisioner.resources.markers import (
    ApiField,
    Compare,
    IpBlock,
    Kind,
    PathParam,
    build_payload,
    collect_api_fields,
    collect_compare_strategies,
    collect_field_kinds,
    collect_ip_block_fields,
    collect_path_params,
    collect_payload_compare_strategies,
    extract_api_attrs,
    immutable_fields,
)


class Widget(BaseModel):
    owner: Annotated[str, PathParam(), Kind("required-immutable")]
    size: Annotated[int, ApiField("size"), Kind("required-mutable")]
    label: Annotated[str, ApiField("label")] = ""
    hosts: Annotated[list[str], ApiField("hosts"), Compare("set"), IpBlock()] = Field(
        default_factory=list
    )
    enabled: Annotated[bool | None, ApiField("isEnabled")] = None
    weight: Annotated[int | None, ApiField("weight")] = None


def _frontend(**kwargs: Any) -> TcpFrontendResource:
    base: dict[str, Any] = {"name": "web", "service_name": "lb-1", "port": "80", "zone": "rbx"}
    return TcpFrontendResource(**{**base, **kwargs})


class TestIntrospection:
    def test_api_fields_name_table(self) -> None:
        assert collect_api_fields(Widget) == {
            "size": "size",
            "label": "label",
            "hosts": "hosts",
            "enabled": "isEnabled",
            "weight": "weight",
        }

    def test_field_kinds(self) -> None:
        assert collect_field_kinds(Widget) == {
            "owner": "required-immutable",
            "size": "required-mutable",
        }
        assert immutable_fields(Widget) == ["owner"]

    def test_other_markers(self) -> None:
        assert collect_path_params(Widget) == ["owner"]
        assert collect_ip_block_fields(Widget) == ["hosts"]
        assert collect_compare_strategies(Widget) == {"hosts": "set"}
        assert collect_payload_compare_strategies(Widget) == {"hosts": "set"}

    def test_frontend_kinds(self) -> None:
        assert immutable_fields(TcpFrontendResource) == ["service_name"]
        kinds = collect_field_kinds(TcpFrontendResource)
        assert kinds["port"] == "required-mutable"
        assert kinds["zone"] == "required-mutable"
        assert kinds["ssl"] == "optional-computed"


class TestBuildPayload:
    def test_unset_optionals_are_omitted(self) -> None:
        payload = build_payload(Widget(owner="me", size=3))
        assert payload == {"size": 3}

    def test_explicit_false_and_zero_are_sent(self) -> None:
        payload = build_payload(Widget(owner="me", size=3, enabled=False, weight=0))
        assert payload == {"size": 3, "isEnabled": False, "weight": 0}

    def test_required_zero_is_sent(self) -> None:
        assert build_payload(Widget(owner="me", size=0)) == {"size": 0}

    def test_collections_sorted(self) -> None:
        payload = build_payload(Widget(owner="me", size=1, hosts=["10.0.0.1", "1.1.1.1"]))
        assert payload["hosts"] == ["1.1.1.1", "10.0.0.1"]

    def test_path_params_not_in_payload(self) -> None:
        assert "owner" not in build_payload(Widget(owner="me", size=1, label="x"))

    def test_frontend_example_payload(self) -> None:
        frontend = _frontend(allowed_source=["1.2.3.0/24"], ssl=False)

        payload = build_payload(frontend)

        assert json.dumps(payload, separators=(",", ":")) == (
            '{"port":"80","zone":"rbx","allowedSource":["1.2.3.0/24"],"ssl":false}'
        )
        assert "disabled" not in payload
        assert "defaultFarmId" not in payload
        assert "defaultSslId" not in payload

    def test_frontend_empty_display_name_omitted(self) -> None:
        assert "displayName" not in build_payload(_frontend(display_name=""))
        assert build_payload(_frontend(display_name="edge"))["displayName"] == "edge"

    def test_frontend_default_farm_zero_sent(self) -> None:
        assert build_payload(_frontend(default_farm_id=0))["defaultFarmId"] == 0


class TestExtractApiAttrs:
    def test_only_returned_fields(self) -> None:
        attrs = extract_api_attrs(Widget, {"size": 4, "isEnabled": True})
        assert attrs == {"size": 4, "enabled": True}

    def test_null_values_skipped(self) -> None:
        attrs = extract_api_attrs(Widget, {"size": 4, "weight": None})
        assert attrs == {"size": 4}

    def test_lists_sorted(self) -> None:
        attrs = extract_api_attrs(Widget, {"hosts": ["b", "a"]})
        assert attrs == {"hosts": ["a", "b"]}

    def test_unknown_keys_ignored(self) -> None:
        assert extract_api_attrs(Widget, {"frontendId": 1, "other": "x"}) == {}
