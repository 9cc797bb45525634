"""
Docker Vhoster 主应用模块
"""

import logging
import sys
from typing import Callable, Optional

from vhoster import preflight
from vhoster.config import Config
from vhoster.connection import ClientFactory, ConnectionSupervisor, make_client_factory
from vhoster.events import DockerEventHandler
from vhoster.hosts_manager import HostsFileManager
from vhoster.registry import ContainerRegistry
from vhoster.resolver import VhostResolver


class DockerVhoster:
    """
    主应用控制器，协调所有组件

    管理 Docker Vhoster 应用的生命周期：
    - 启动前检查 hosts 文件权限和 Docker socket
    - 连接 Docker（失败时无限重试）
    - 启动时扫描现有容器
    - 监控 Docker 事件以维护 hosts 文件中的托管块
    """

    def __init__(
        self,
        config: Config,
        client_factory: Optional[ClientFactory] = None,
        sleep: Optional[Callable[[float], None]] = None
    ):
        """
        初始化 Docker Vhoster 应用

        参数:
            config: 应用配置
            client_factory: 创建 Docker 客户端的函数，默认根据配置生成
            sleep: 连接重试时的等待函数

        异常:
            ValueError: 如果配置无效
        """
        self.config = config
        self.config.validate()

        self.logger = self._setup_logging()
        self.registry = ContainerRegistry()

        supervisor_kwargs = {}
        if sleep is not None:
            supervisor_kwargs['sleep'] = sleep
        self.supervisor = ConnectionSupervisor(
            client_factory or make_client_factory(config.docker_host),
            config.connect_retry_interval,
            self.logger,
            **supervisor_kwargs
        )

        self.client = None
        self.event_handler: Optional[DockerEventHandler] = None

    def _setup_logging(self) -> logging.Logger:
        """
        配置日志系统

        返回:
            配置好的日志记录器实例
        """
        logger = logging.getLogger('docker-vhoster')
        logger.setLevel(self.config.log_level)

        # 避免重复的处理器
        if logger.handlers:
            return logger

        # 带格式的控制台处理器
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(self.config.log_level)

        # 格式: 时间戳 - 名称 - 级别 - 消息
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)

        logger.addHandler(handler)
        return logger

    def preflight(self) -> None:
        """
        启动前检查

        异常:
            preflight.PreflightError: hosts 文件无法读写或 Docker socket 不存在
        """
        preflight.check_hosts_file_access(self.config.host_file_location)
        preflight.check_docker_socket(self.config.docker_socket_path)

    def connect(self) -> None:
        """连接 Docker 并初始化依赖客户端的组件"""
        self.client, _ = self.supervisor.connect()

        resolver = VhostResolver(
            self.client,
            self.config.env_var_names,
            self.logger
        )
        hosts_manager = HostsFileManager(
            self.config.host_file_location,
            self.registry,
            self.config.vhost_ip_addr,
            self.logger
        )
        self.event_handler = DockerEventHandler(
            self.client,
            resolver,
            self.registry,
            hosts_manager,
            self.logger
        )

    def run(self) -> None:
        """
        启动主事件循环

        阻塞直到 Docker 事件流结束。
        """
        self.logger.info("=" * 60)
        self.logger.info("Docker Vhoster 启动中...")
        self.logger.info(f"Hosts 文件: {self.config.host_file_location}")
        self.logger.info(f"环境变量名: {self.config.env_var_name}")
        self.logger.info(f"虚拟主机 IP: {self.config.vhost_ip_addr}")
        self.logger.info("=" * 60)

        self.preflight()
        self.connect()
        self.event_handler.run()

    def stop(self) -> None:
        """停止事件监听并关闭 Docker 客户端"""
        if self.event_handler is not None:
            self.event_handler.stop()
        if self.client is not None:
            self.client.close()
