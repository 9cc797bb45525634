"""
Docker 连接建立模块，带固定间隔的无限重试
"""

import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

import docker
import requests
from docker.errors import DockerException

UNKNOWN = "<Unknown>"

ClientFactory = Callable[[], docker.DockerClient]


def make_client_factory(docker_host: Optional[str] = None) -> ClientFactory:
    """
    根据配置生成 Docker 客户端工厂

    参数:
        docker_host: Docker 守护进程 URL，None 表示从环境检测
    """
    def factory() -> docker.DockerClient:
        if docker_host:
            return docker.DockerClient(base_url=docker_host)
        return docker.from_env()

    return factory


def describe_version(info: Dict[str, Any]) -> Tuple[str, str]:
    """
    从 version 接口的返回中提取平台名和 Engine 版本

    返回:
        (平台名, Engine 版本)，缺失的部分为 "<Unknown>"
    """
    platform = (info.get('Platform') or {}).get('Name') or UNKNOWN
    engine = UNKNOWN
    for component in info.get('Components') or []:
        if component.get('Name') == 'Engine':
            engine = component.get('Version') or UNKNOWN
            break
    return platform, engine


class ConnectionSupervisor:
    """
    负责与 Docker 守护进程的初始握手

    握手失败后等待固定间隔再重试，没有次数上限：
    没有 Docker 守护进程时这个程序无事可做，只能等待。
    只用于启动阶段，事件流中途断开不在此处理。
    """

    def __init__(
        self,
        client_factory: ClientFactory,
        retry_interval: float,
        logger: logging.Logger,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        参数:
            client_factory: 创建 Docker 客户端的函数
            retry_interval: 两次尝试之间的等待秒数
            logger: 日志记录器实例
            sleep: 等待函数
        """
        self.client_factory = client_factory
        self.retry_interval = retry_interval
        self.logger = logger
        self.sleep = sleep

    def connect(self) -> Tuple[docker.DockerClient, Dict[str, Any]]:
        """
        建立连接，直到成功为止

        返回:
            (Docker 客户端, version 接口返回的信息)
        """
        attempt = 0
        while True:
            attempt += 1
            self.logger.info(f"正在尝试连接到 Docker (第 {attempt} 次)...")
            try:
                client = self.client_factory()
                info = client.version()
            except (DockerException, requests.exceptions.ConnectionError) as e:
                self.logger.error(
                    f"连接到 Docker 守护进程失败: {e}. "
                    f"{self.retry_interval:g} 秒后重试"
                )
                self.sleep(self.retry_interval)
                continue

            platform, engine = describe_version(info)
            self.logger.info(f"已连接到 {platform}, Engine {engine}")
            return client, info
