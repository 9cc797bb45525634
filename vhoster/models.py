"""
Docker Vhoster 数据模型
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ContainerRecord:
    """
    代表一个被追踪的运行中容器

    属性:
        id: Docker 分配的容器 ID，作为注册表的键
        hostnames: 容器对应的虚拟主机名，解析后永不为空
        name: 容器显示名称（去掉开头的 /），仅用于日志
    """

    id: str
    hostnames: Tuple[str, ...]
    name: str = ""

    def to_hosts_lines(self, ip_address: str) -> Tuple[str, ...]:
        """
        转换为 hosts 文件行

        格式: <IP> <主机名>
        """
        return tuple(f"{ip_address} {hostname}" for hostname in self.hostnames)

    def __str__(self) -> str:
        label = self.name or self.id[:12]
        return f"{label} → {', '.join(self.hostnames)}"
