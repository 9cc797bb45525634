"""
容器检查和虚拟主机名解析模块
"""

import logging
from typing import Iterable, List, Optional

import docker
import requests
from docker.errors import DockerException

from vhoster.models import ContainerRecord

DEFAULT_SUFFIX = ".local"


def parse_env_var_names(value: str) -> List[str]:
    """
    拆分逗号分隔的环境变量名配置

    例如 "VIRTUAL_HOST,ETC_HOST" -> ["VIRTUAL_HOST", "ETC_HOST"]
    """
    return [name.strip() for name in value.split(',') if name.strip()]


def default_hostname(container_name: str) -> str:
    """容器名去掉开头的 / 后加上 .local"""
    return f"{container_name.lstrip('/')}{DEFAULT_SUFFIX}"


def hostnames_from_env(
    env: Iterable[str],
    var_names: Iterable[str],
    container_name: str,
) -> List[str]:
    """
    从容器环境变量中提取虚拟主机名

    按配置的变量名顺序扫描 KEY=VALUE 条目，键必须完全匹配。
    每个值再按逗号拆分，主机名原样使用（不去除空白），保留首次出现的顺序。
    没有任何主机名时，生成一个默认主机名。

    参数:
        env: 容器的环境变量列表（KEY=VALUE 格式）
        var_names: 可识别的环境变量名
        container_name: 容器显示名称

    返回:
        主机名列表，永不为空
    """
    env = list(env)
    hostnames: List[str] = []

    for var_name in var_names:
        for entry in env:
            key, sep, value = entry.partition('=')
            if not sep or key != var_name:
                continue
            hostnames.extend(token for token in value.split(',') if token)

    if not hostnames:
        return [default_hostname(container_name)]
    return hostnames


class VhostResolver:
    """
    通过 Docker API 检查容器并解析其虚拟主机名

    容器可能在事件到达和检查之间已经消失，
    这种情况下只跳过该容器，不影响事件循环。
    """

    def __init__(
        self,
        client: docker.DockerClient,
        var_names: Iterable[str],
        logger: logging.Logger
    ):
        """
        初始化解析器

        参数:
            client: Docker 客户端实例
            var_names: 可识别的环境变量名
            logger: 日志记录器实例
        """
        self.client = client
        self.var_names = list(var_names)
        self.logger = logger

    def resolve(self, container_id: str) -> Optional[ContainerRecord]:
        """
        检查容器并构建 ContainerRecord

        参数:
            container_id: 容器 ID

        返回:
            ContainerRecord，检查失败时返回 None
        """
        try:
            info = self.client.api.inspect_container(container_id)
        except (DockerException, requests.exceptions.RequestException) as e:
            self.logger.warning(
                f"检查容器 {container_id[:12]} 失败，已跳过: {e}"
            )
            return None

        try:
            name = info.get('Name') or container_id[:12]
            env = (info.get('Config') or {}).get('Env') or []
        except AttributeError as e:
            self.logger.error(
                f"容器 {container_id[:12]} 的检查结果格式异常，已跳过: {e}"
            )
            return None

        hostnames = hostnames_from_env(env, self.var_names, name)
        record = ContainerRecord(
            id=container_id,
            hostnames=tuple(hostnames),
            name=name.lstrip('/'),
        )
        self.logger.debug(f"容器解析结果: {record}")
        return record
