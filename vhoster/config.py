"""
配置管理模块，支持环境变量和命令行参数
"""

import argparse
import ipaddress
import os
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence
from urllib.parse import urlparse

from vhoster.resolver import parse_env_var_names

DEFAULT_DOCKER_SOCKET = "/var/run/docker.sock"


@dataclass
class Config:
    """应用配置类，从环境变量加载配置，命令行参数优先"""

    host_file_location: str = "/etc/hosts"
    env_var_name: str = "VIRTUAL_HOST,ETC_HOST"
    vhost_ip_addr: str = "127.0.0.1"
    docker_host: Optional[str] = None
    log_level: str = "INFO"
    connect_retry_interval: float = 60.0

    @classmethod
    def from_env(cls) -> "Config":
        """
        从环境变量加载配置

        环境变量说明:
            HOST_FILE_LOCATION: hosts 文件路径 (默认: /etc/hosts)
            ENV_VAR_NAME: 逗号分隔的容器环境变量名 (默认: VIRTUAL_HOST,ETC_HOST)
            VHOST_IP_ADDR: 虚拟主机名指向的 IP (默认: 127.0.0.1)
            DOCKER_HOST: Docker 守护进程 socket URL (默认: 自动检测)
            LOG_LEVEL: 日志级别 (默认: INFO)
            CONNECT_RETRY_INTERVAL: 连接 Docker 失败后的重试间隔秒数 (默认: 60)
        """
        return cls(
            host_file_location=os.getenv("HOST_FILE_LOCATION", "/etc/hosts"),
            env_var_name=os.getenv("ENV_VAR_NAME", "VIRTUAL_HOST,ETC_HOST"),
            vhost_ip_addr=os.getenv("VHOST_IP_ADDR", "127.0.0.1"),
            docker_host=os.getenv("DOCKER_HOST") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            connect_retry_interval=float(os.getenv("CONNECT_RETRY_INTERVAL", "60")),
        )

    @classmethod
    def from_args(cls, argv: Optional[Sequence[str]] = None) -> "Config":
        """
        先从环境变量加载，再用命令行参数覆盖

        参数:
            argv: 命令行参数，None 表示使用 sys.argv
        """
        config = cls.from_env()
        args = build_parser(config).parse_args(argv)
        return replace(
            config,
            host_file_location=args.host_file_location,
            env_var_name=args.env_var_name,
            vhost_ip_addr=args.vhost_ip_addr,
            docker_host=args.docker_host,
            log_level=args.log_level.upper(),
            connect_retry_interval=args.connect_retry_interval,
        )

    @property
    def env_var_names(self) -> List[str]:
        return parse_env_var_names(self.env_var_name)

    @property
    def docker_socket_path(self) -> Optional[str]:
        """需要预检的 unix socket 路径，TCP 等远程地址返回 None"""
        if not self.docker_host:
            return DEFAULT_DOCKER_SOCKET
        parsed = urlparse(self.docker_host)
        if parsed.scheme in ("unix", "http+unix"):
            return parsed.path or DEFAULT_DOCKER_SOCKET
        return None

    def validate(self) -> None:
        """验证配置是否有效"""
        valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.log_level not in valid_log_levels:
            raise ValueError(
                f"无效的 LOG_LEVEL: {self.log_level}. "
                f"必须是以下之一: {', '.join(sorted(valid_log_levels))}"
            )

        try:
            ipaddress.ip_address(self.vhost_ip_addr)
        except ValueError:
            raise ValueError(f"无效的 VHOST_IP_ADDR: {self.vhost_ip_addr}") from None

        if not self.env_var_names:
            raise ValueError("ENV_VAR_NAME 至少需要包含一个环境变量名")

        if self.connect_retry_interval <= 0:
            raise ValueError(
                f"无效的 CONNECT_RETRY_INTERVAL: {self.connect_retry_interval}. 必须大于 0"
            )


def build_parser(defaults: Config) -> argparse.ArgumentParser:
    """构建命令行解析器，默认值来自环境变量"""
    parser = argparse.ArgumentParser(
        prog="docker-vhoster",
        description="根据运行中容器的虚拟主机名自动维护 hosts 文件",
    )
    parser.add_argument(
        "-f", "--host-file-location",
        default=defaults.host_file_location,
        help="hosts 文件路径 (环境变量 HOST_FILE_LOCATION)",
    )
    parser.add_argument(
        "-e", "--env-var-name",
        default=defaults.env_var_name,
        help="逗号分隔的容器环境变量名 (环境变量 ENV_VAR_NAME)",
    )
    parser.add_argument(
        "-i", "--vhost-ip-addr",
        default=defaults.vhost_ip_addr,
        help="虚拟主机名指向的 IP (环境变量 VHOST_IP_ADDR)",
    )
    parser.add_argument(
        "--docker-host",
        default=defaults.docker_host,
        help="Docker 守护进程 URL (环境变量 DOCKER_HOST)",
    )
    parser.add_argument(
        "--log-level",
        default=defaults.log_level,
        help="日志级别 (环境变量 LOG_LEVEL)",
    )
    parser.add_argument(
        "--connect-retry-interval",
        type=float,
        default=defaults.connect_retry_interval,
        help="连接 Docker 失败后的重试间隔秒数 (环境变量 CONNECT_RETRY_INTERVAL)",
    )
    return parser
