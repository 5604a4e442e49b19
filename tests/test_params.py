"""Unit tests for the parameter stores."""

from __future__ import annotations

import pytest

from mongo_warehouse.core.params import EnvironmentParameterStore, MappingParameterStore, coerce


def test_environment_store_maps_keys_to_upper_case_variables():
    store = EnvironmentParameterStore(environ={"WAREHOUSE_HOST": "db.local", "WAREHOUSE_PORT": "27018"})
    assert store.get("warehouse_host", "localhost") == "db.local"
    assert store.get("warehouse_port", 27017) == 27018


def test_environment_store_applies_prefix():
    store = EnvironmentParameterStore(prefix="robot", environ={"ROBOT_WAREHOUSE_USER": "alice", "WAREHOUSE_USER": "bob"})
    assert store.variable_name("warehouse_user") == "ROBOT_WAREHOUSE_USER"
    assert store.get("warehouse_user", "") == "alice"


def test_environment_store_returns_default_when_missing():
    store = EnvironmentParameterStore(environ={})
    assert store.get("warehouse_authenticate", False) is False


def test_environment_store_treats_empty_value_as_unset():
    store = EnvironmentParameterStore(environ={"WAREHOUSE_HOST": "", "WAREHOUSE_PORT": ""})
    assert store.get("warehouse_host", "localhost") == "localhost"
    assert store.get("warehouse_port", 27017) == 27017


def test_uncoercible_value_falls_back_to_default():
    store = EnvironmentParameterStore(environ={"WAREHOUSE_PORT": "not-a-port", "WAREHOUSE_AUTHENTICATE": "maybe"})
    assert store.get("warehouse_port", 27017) == 27017
    assert store.get("warehouse_authenticate", False) is False


@pytest.mark.parametrize("raw", ["true", "TRUE", "1", "yes", "on"])
def test_boolean_strings_are_true(raw):
    assert coerce(raw, False) is True


@pytest.mark.parametrize("raw", ["false", "0", "no", "off", ""])
def test_boolean_strings_are_false(raw):
    assert coerce(raw, True) is False


def test_coerce_rejects_fractional_ints():
    with pytest.raises(ValueError):
        coerce(27017.5, 0)
    assert coerce(27017.0, 0) == 27017


def test_mapping_store_prefers_namespaced_value():
    store = MappingParameterStore(
        {"/robot/warehouse_host": "robot-db", "warehouse_host": "global-db", "warehouse_port": 27019},
        namespace="/robot/",
    )
    assert store.get("warehouse_host", "localhost") == "robot-db"
    assert store.get("warehouse_port", 27017) == 27019


def test_mapping_store_set_writes_under_namespace():
    store = MappingParameterStore(namespace="robot")
    store.set("warehouse_pwd", "secret")
    assert store.qualified_name("warehouse_pwd") == "robot/warehouse_pwd"
    assert store.get("warehouse_pwd", "") == "secret"
    assert MappingParameterStore().get("warehouse_pwd", "") == ""
