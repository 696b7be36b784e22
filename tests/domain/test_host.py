"""Tests for host-bridged values and the bridge/unbridge helpers."""

import pytest

from dson.domain.host import (
    HostArray,
    HostBool,
    HostMapping,
    HostNull,
    HostNumber,
    HostOpaque,
    HostString,
    HostValue,
    bridge,
    unbridge,
)
from dson.domain.types import ValueKind


class TestHostScalars:
    def test_base_class_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            HostValue()  # type: ignore[abstract]

    def test_kinds(self) -> None:
        assert HostNull().kind is ValueKind.NULL
        assert HostBool(True).kind is ValueKind.BOOLEAN
        assert HostNumber(1).kind is ValueKind.NUMBER
        assert HostString("x").kind is ValueKind.STRING
        assert HostOpaque(object()).kind is ValueKind.OPAQUE

    def test_bool_requires_bool(self) -> None:
        with pytest.raises(TypeError):
            HostBool(1)  # type: ignore[arg-type]

    def test_number_rejects_bool(self) -> None:
        with pytest.raises(TypeError):
            HostNumber(True)

    def test_number_integral(self) -> None:
        assert HostNumber(3).is_integral
        assert HostNumber(3.0).is_integral
        assert not HostNumber(3.5).is_integral

    def test_frozen(self) -> None:
        value = HostBool(False)
        with pytest.raises(Exception):
            value.value = True  # type: ignore[misc]


class TestHostContainers:
    def test_array_stores_tuple(self) -> None:
        arr = HostArray([1, 2, 3])  # type: ignore[arg-type]
        assert arr.items == (1, 2, 3)
        assert len(arr) == 3
        assert list(arr) == [1, 2, 3]
        assert arr[1] == 2
        assert arr.kind is ValueKind.ARRAY

    def test_mapping_from_dict_keeps_order(self) -> None:
        mapping = HostMapping({"b": 1, "a": 2})  # type: ignore[arg-type]
        assert mapping.keys() == ["b", "a"]
        assert list(mapping.items()) == [("b", 1), ("a", 2)]
        assert len(mapping) == 2
        assert mapping.kind is ValueKind.MAPPING

    def test_mapping_from_pairs(self) -> None:
        mapping = HostMapping([("k", HostBool(True))])  # type: ignore[arg-type]
        assert mapping.unwrap() == {"k": HostBool(True)}


class TestBridge:
    def test_scalars(self) -> None:
        assert bridge(None) == HostNull()
        assert bridge(True) == HostBool(True)
        assert bridge(7) == HostNumber(7)
        assert bridge(1.5) == HostNumber(1.5)
        assert bridge("s") == HostString("s")

    def test_nested(self) -> None:
        bridged = bridge({"a": [1, True]})
        assert bridged == HostMapping(
            ((HostString("a"), HostArray((HostNumber(1), HostBool(True)))),)
        )

    def test_host_values_pass_through(self) -> None:
        value = HostBool(False)
        assert bridge(value) is value

    def test_unknown_objects_become_opaque(self) -> None:
        marker = object()
        assert bridge(marker) == HostOpaque(marker)

    def test_unbridge_inverts_bridge(self) -> None:
        data = {"a": [1, 2.5, None], "b": {"c": "d"}, "e": False}
        assert unbridge(bridge(data)) == data

    def test_unbridge_array_keys_become_tuples(self) -> None:
        mapping = HostMapping(((HostArray((HostNumber(1),)), HostString("v")),))
        assert unbridge(mapping) == {(1,): "v"}
