"""
测试共用的 fixture
"""

import logging

import pytest

from vhoster.hosts_manager import HostsFileManager
from vhoster.registry import ContainerRegistry
from vhoster.resolver import VhostResolver


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("docker-vhoster-test")


@pytest.fixture
def registry() -> ContainerRegistry:
    return ContainerRegistry()


@pytest.fixture
def hosts_file(tmp_path):
    path = tmp_path / "hosts"
    path.write_text("127.0.0.1 localhost\n::1 localhost\n", encoding="utf-8")
    return path


@pytest.fixture
def hosts_manager(hosts_file, registry, logger) -> HostsFileManager:
    return HostsFileManager(str(hosts_file), registry, "127.0.0.1", logger)


@pytest.fixture
def make_resolver(logger):
    def factory(client, var_names=("VIRTUAL_HOST", "ETC_HOST")):
        return VhostResolver(client, var_names, logger)
    return factory
