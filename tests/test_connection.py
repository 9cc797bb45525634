"""
Docker 连接重试的测试
"""

import pytest
import requests
from docker.errors import DockerException

from vhoster.connection import ConnectionSupervisor, describe_version
from fakes import FakeClient


def test_connect_first_try(logger):
    client = FakeClient()
    sleeps = []

    supervisor = ConnectionSupervisor(lambda: client, 60, logger, sleep=sleeps.append)
    connected, info = supervisor.connect()

    assert connected is client
    assert info["Platform"]["Name"] == "Docker Engine - Community"
    assert sleeps == []


@pytest.mark.parametrize("error", [
    DockerException("Error while fetching server API version"),
    requests.exceptions.ConnectionError("Connection refused"),
])
def test_connect_retries_with_fixed_interval(logger, error):
    client = FakeClient()
    attempts = []
    sleeps = []

    def factory():
        attempts.append(1)
        if len(attempts) < 4:
            raise error
        return client

    supervisor = ConnectionSupervisor(factory, 60, logger, sleep=sleeps.append)
    connected, _ = supervisor.connect()

    assert connected is client
    assert len(attempts) == 4
    assert sleeps == [60, 60, 60]


def test_version_call_failure_is_retried(logger):
    class FlakyClient(FakeClient):
        calls = 0

        def version(self):
            FlakyClient.calls += 1
            if FlakyClient.calls == 1:
                raise DockerException("daemon not ready")
            return super().version()

    sleeps = []
    supervisor = ConnectionSupervisor(FlakyClient, 5, logger, sleep=sleeps.append)

    supervisor.connect()

    assert sleeps == [5]


def test_describe_version():
    assert describe_version(FakeClient().version()) == ("Docker Engine - Community", "24.0.7")


def test_describe_version_missing_parts():
    assert describe_version({}) == ("<Unknown>", "<Unknown>")
    info = {"Platform": {"Name": "podman"}, "Components": [{"Name": "Conmon", "Version": "2"}]}
    assert describe_version(info) == ("podman", "<Unknown>")
