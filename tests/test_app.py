"""
应用组装和入口的测试
"""

import pytest

from vhoster import cli
from vhoster import Config, DockerVhoster
from vhoster.preflight import PreflightError
from fakes import FakeClient, container_event, inspect_payload


def _config(hosts_file, tmp_path):
    sock = tmp_path / "docker.sock"
    sock.touch()
    return Config(
        host_file_location=str(hosts_file),
        docker_host=f"unix://{sock}",
        connect_retry_interval=1,
    )


def test_run_end_to_end(hosts_file, tmp_path):
    client = FakeClient(
        {"c1": inspect_payload("/web", ["VIRTUAL_HOST=web.local"])},
        events=[container_event("start", "c2"), container_event("die", "c1")],
    )
    client.api.inspect["c2"] = inspect_payload("/api", ["VIRTUAL_HOST=api.local,api2.local"])

    vhoster = DockerVhoster(_config(hosts_file, tmp_path), client_factory=lambda: client)
    vhoster.run()
    vhoster.stop()

    content = hosts_file.read_text(encoding="utf-8")
    assert content.startswith("127.0.0.1 localhost\n::1 localhost\n")
    assert "web.local" not in content
    assert "127.0.0.1 api.local\n127.0.0.1 api2.local\n" in content
    assert client.closed


def test_run_fails_preflight_without_socket(hosts_file, tmp_path):
    config = Config(
        host_file_location=str(hosts_file),
        docker_host=f"unix://{tmp_path / 'missing.sock'}",
    )
    vhoster = DockerVhoster(config, client_factory=FakeClient)

    with pytest.raises(PreflightError):
        vhoster.run()


def test_invalid_config_rejected():
    with pytest.raises(ValueError):
        DockerVhoster(Config(log_level="LOUD"))


def test_main_exits_nonzero_on_preflight_failure(tmp_path, monkeypatch, capsys):
    monkeypatch.delenv("DOCKER_HOST", raising=False)
    monkeypatch.setattr(cli.signal, "signal", lambda *args: None)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-f", str(tmp_path / "missing-hosts")])

    assert excinfo.value.code == 1
    assert "HOST_FILE_LOCATION" in capsys.readouterr().err


def test_main_exits_nonzero_on_invalid_config(monkeypatch, capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-i", "not-an-ip"])

    assert excinfo.value.code == 1
    assert "VHOST_IP_ADDR" in capsys.readouterr().err
