"""
Docker 事件处理和监控模块
"""

import enum
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Set

import docker
from docker.errors import DockerException

from vhoster.hosts_manager import HostsFileManager
from vhoster.registry import ContainerRegistry
from vhoster.resolver import VhostResolver


class EventLoopState(enum.Enum):
    CONNECTING = "connecting"
    INITIAL_SYNC = "initial_sync"
    STREAMING = "streaming"
    TERMINATED = "terminated"


class DockerEventHandler:
    """
    消费 Docker 容器事件，维护注册表并同步 hosts 文件

    启动时先全量扫描运行中的容器，之后逐个按到达顺序处理
    start、stop、die 事件，直到事件流结束。
    """

    START_EVENTS: Set[str] = {'start'}
    STOP_EVENTS: Set[str] = {'stop', 'die'}
    EVENT_FILTERS: Dict[str, List[str]] = {
        'event': ['start', 'stop', 'die'],
        'type': ['container'],
    }

    def __init__(
        self,
        client: docker.DockerClient,
        resolver: VhostResolver,
        registry: ContainerRegistry,
        hosts_manager: HostsFileManager,
        logger: logging.Logger,
        max_workers: int = 8,
        clock: Callable[[], float] = time.time
    ):
        """
        初始化事件处理器

        参数:
            client: Docker 客户端实例
            resolver: 虚拟主机名解析器
            registry: 容器注册表
            hosts_manager: hosts 文件管理器
            logger: 日志记录器实例
            max_workers: 初始扫描时并发检查容器的线程数
            clock: 返回当前 Unix 时间的函数
        """
        self.client = client
        self.resolver = resolver
        self.registry = registry
        self.hosts_manager = hosts_manager
        self.logger = logger
        self.max_workers = max_workers
        self.clock = clock

        self.state = EventLoopState.CONNECTING
        self.running = True
        self.since: Optional[int] = None
        self._stream = None

    def run(self) -> None:
        """全量同步后进入事件循环，阻塞直到事件流结束"""
        self.initial_sync()
        self.listen_events()

    def initial_sync(self) -> None:
        """
        扫描所有运行中的容器并写入一次 hosts 文件

        记录扫描开始的时间，之后订阅事件时从这个时间点开始，
        避免扫描和订阅之间发生的事件丢失。

        异常:
            docker.errors.APIError: 如果无法列出容器
        """
        self.state = EventLoopState.INITIAL_SYNC
        self.since = int(self.clock())

        self.logger.info("正在获取初始容器列表")
        containers = self.client.api.containers(quiet=True)
        container_ids = [c['Id'] for c in containers]
        self.logger.debug(f"发现 {len(container_ids)} 个运行中的容器")

        if container_ids:
            workers = min(self.max_workers, len(container_ids))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                records = list(executor.map(self.resolver.resolve, container_ids))
        else:
            records = []

        for record in records:
            if record is None:
                continue
            self.registry.upsert(record)
            self.logger.info(f"已添加主机记录: {record}")

        self._sync()

    def listen_events(self) -> None:
        """
        监听 Docker 事件并处理容器变化

        在循环中运行直到事件流结束或被停止。

        异常:
            docker.errors.APIError: 如果 Docker API 通信失败
        """
        self.state = EventLoopState.STREAMING
        self.logger.info("正在等待 Docker 事件...")

        try:
            self._stream = self.client.api.events(
                since=self.since,
                filters=self.EVENT_FILTERS,
                decode=True
            )
            for event in self._stream:
                if not self.running:
                    self.logger.info("事件监听器已停止")
                    break
                self.handle_event(event)
            else:
                self.logger.info("Docker 连接已终止，正在退出...")

        except DockerException as e:
            self.logger.error(f"事件监听器中的 Docker API 错误: {e}")
            raise
        finally:
            self._stream = None
            self.state = EventLoopState.TERMINATED

    def handle_event(self, event: Dict[str, Any]) -> None:
        """
        处理单个容器事件

        参数:
            event: 解码后的 Docker 事件
        """
        if event.get('Type', 'container') != 'container':
            return

        action = event.get('Action') or event.get('status')
        actor = event.get('Actor') or {}
        container_id = actor.get('ID') or event.get('id')
        if not container_id:
            self.logger.debug(f"忽略缺少容器 ID 的事件: {event}")
            return

        if action in self.STOP_EVENTS:
            self.handle_container_stop(container_id, action)
        elif action in self.START_EVENTS:
            self.handle_container_start(container_id)
        else:
            self.logger.debug(f"忽略事件: {action} ({container_id[:12]})")

    def handle_container_start(self, container_id: str) -> None:
        self.logger.info(f"容器事件: start ({container_id[:12]})")

        # 每次 start 都整体重新解析，容器以新配置重启时不会残留旧主机名
        record = self.resolver.resolve(container_id)
        if record is None:
            return

        self.registry.upsert(record)
        self.logger.info(f"已添加主机记录: {record}")
        self._sync()

    def handle_container_stop(self, container_id: str, action: str = 'stop') -> None:
        self.logger.info(f"容器事件: {action} ({container_id[:12]})")

        record = self.registry.remove(container_id)
        if record is None:
            self.logger.debug(f"容器 {container_id[:12]} 未被追踪")
        else:
            self.logger.info(f"已移除主机记录: {record}")
        self._sync()

    def _sync(self) -> None:
        try:
            self.hosts_manager.sync()
        except OSError as e:
            # 保持上一次成功写入的状态，下一个事件会再次同步
            self.logger.error(f"更新 hosts 文件时出错，等待下一个事件重试: {e}")

    def stop(self) -> None:
        """停止监听事件"""
        self.running = False
        self.logger.info("正在停止事件监听器...")
        stream = self._stream
        if stream is not None and hasattr(stream, 'close'):
            stream.close()
