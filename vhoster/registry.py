"""
容器注册表模块：容器 ID 到虚拟主机名的线程安全映射
"""

import threading
from typing import Dict, Iterable, Optional, Tuple, Union

from vhoster.models import ContainerRecord


class ContainerRegistry:
    """
    运行中容器的唯一数据源

    所有修改和快照读取都在同一把锁下互斥执行。
    调用方只能拿到不可变的快照，永远拿不到内部的 dict。
    """

    def __init__(self):
        self._records: Dict[str, ContainerRecord] = {}
        self._lock = threading.Lock()

    def upsert(
        self,
        record: Union[ContainerRecord, str],
        hostnames: Optional[Iterable[str]] = None,
        name: str = "",
    ) -> ContainerRecord:
        """
        插入或整体替换一个容器记录

        参数:
            record: ContainerRecord 实例，或容器 ID
            hostnames: 传入容器 ID 时对应的主机名
            name: 传入容器 ID 时对应的容器名

        返回:
            存入注册表的记录

        异常:
            ValueError: 如果容器 ID 为空
        """
        if not isinstance(record, ContainerRecord):
            record = ContainerRecord(
                id=record,
                hostnames=tuple(hostnames or ()),
                name=name,
            )
        if not record.id:
            raise ValueError("容器 ID 不能为空")

        with self._lock:
            self._records[record.id] = record
        return record

    def remove(self, container_id: str) -> Optional[ContainerRecord]:
        """
        移除容器记录

        未被追踪的容器（例如启动时检查失败的）直接忽略，返回 None。
        """
        with self._lock:
            return self._records.pop(container_id, None)

    def get(self, container_id: str) -> Optional[ContainerRecord]:
        with self._lock:
            return self._records.get(container_id)

    def snapshot(self) -> Tuple[ContainerRecord, ...]:
        """返回按容器 ID 排序的不可变快照"""
        with self._lock:
            return tuple(
                self._records[container_id]
                for container_id in sorted(self._records)
            )

    def __contains__(self, container_id: object) -> bool:
        with self._lock:
            return container_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
