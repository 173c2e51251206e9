# Copyright 2026 Firefly Software Solutions Inc
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for NodeConfig."""

import dataclasses
from unittest.mock import patch

import pytest

from escar.config import NodeConfig, split_csv
from escar.exceptions import ConfigurationError


def make_config(**overrides):
    values = dict(
        app_name="escar",
        datacenter="us-east-1",
        instance_id="i-001",
        rack="us-east-1a",
        asg_name="escar-east-v001",
    )
    values.update(overrides)
    return NodeConfig(**values)


class TestNodeConfig:
    """Tests for NodeConfig."""

    def test_defaults(self):
        """Test deployment mode defaults."""
        config = make_config()

        assert config.tribe_mode_enabled is False
        assert config.tribe_cluster_names == ()
        assert config.dedicated_deployment_enabled is False
        assert config.debug_enabled is False

    def test_cluster_member_id(self):
        """Test the member id joins datacenter and instance id."""
        assert make_config().cluster_member_id == "us-east-1.i-001"

    def test_frozen(self):
        """Test the configuration cannot be modified."""
        config = make_config()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.app_name = "other"

    def test_cluster_names_list_becomes_tuple(self):
        """Test list input is stored as a tuple."""
        config = make_config(tribe_cluster_names=["a", "b"])

        assert config.tribe_cluster_names == ("a", "b")

    def test_cluster_names_single_app(self):
        """Test only the app name is read outside tribe mode."""
        config = make_config(tribe_cluster_names=("a", "b"))

        assert config.cluster_names == ("escar",)

    def test_cluster_names_tribe(self):
        """Test tribe mode reads every cluster in order."""
        config = make_config(tribe_mode_enabled=True, tribe_cluster_names=("b", "a"))

        assert config.cluster_names == ("b", "a")

    def test_cluster_names_tribe_empty(self):
        """Test tribe mode without clusters is a configuration error."""
        config = make_config(tribe_mode_enabled=True)

        with pytest.raises(ConfigurationError):
            config.cluster_names


class TestFromEnv:
    """Tests for NodeConfig.from_env."""

    def test_from_env(self):
        """Test every variable is read."""
        env = {
            "ESCAR_APP_NAME": "search",
            "ESCAR_DC": "eu-west-1",
            "ESCAR_INSTANCE_ID": "i-abc",
            "ESCAR_HOSTNAME": "host.example.com",
            "ESCAR_HOST_IP": "10.1.2.3",
            "ESCAR_RACK": "eu-west-1b",
            "ESCAR_ASG_NAME": "search-master-v002",
            "ESCAR_TRIBE_ENABLED": "true",
            "ESCAR_TRIBE_CLUSTERS": "one, two,,three",
            "ESCAR_DEDICATED_DEPLOYMENT": "YES",
            "ESCAR_DEBUG": "1",
        }
        with patch.dict("os.environ", env, clear=True):
            config = NodeConfig.from_env()

        assert config.app_name == "search"
        assert config.datacenter == "eu-west-1"
        assert config.instance_id == "i-abc"
        assert config.hostname == "host.example.com"
        assert config.host_ip == "10.1.2.3"
        assert config.rack == "eu-west-1b"
        assert config.asg_name == "search-master-v002"
        assert config.tribe_mode_enabled is True
        assert config.tribe_cluster_names == ("one", "two", "three")
        assert config.dedicated_deployment_enabled is True
        assert config.debug_enabled is True

    def test_from_env_defaults(self):
        """Test defaults with an empty environment."""
        with patch.dict("os.environ", {}, clear=True):
            config = NodeConfig.from_env()

        assert config.app_name == "escar"
        assert config.instance_id == ""
        assert config.tribe_mode_enabled is False
        assert config.tribe_cluster_names == ()


class TestValidate:
    """Tests for NodeConfig.validate."""

    def test_valid(self):
        """Test a complete configuration has no errors."""
        assert make_config().validate() == []

    def test_missing_identity(self):
        """Test missing identity fields are reported."""
        config = NodeConfig(app_name="", datacenter="", instance_id="")

        errors = config.validate()

        assert "app_name is required" in errors
        assert "datacenter is required" in errors
        assert "instance_id is required" in errors
        assert "rack is required" in errors
        assert "asg_name is required" in errors

    def test_tribe_without_clusters(self):
        """Test tribe mode needs cluster names."""
        errors = make_config(tribe_mode_enabled=True).validate()

        assert errors == ["tribe mode requires at least one cluster name"]


def test_split_csv():
    """Test blanks and whitespace are dropped."""
    assert split_csv(" a , b,, c ") == ("a", "b", "c")
    assert split_csv("") == ()
    assert split_csv("i-001,i-002") == ("i-001", "i-002")
