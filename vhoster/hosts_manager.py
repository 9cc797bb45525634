"""
Hosts 文件同步模块，保证同一时刻只有一个写入者
"""

import errno
import logging
import os
import stat
import tempfile
import threading
from pathlib import Path

from vhoster import hosts_block
from vhoster.registry import ContainerRegistry

# 无法原子性替换时（挂载进容器的单个文件、目录不可写）改为原地写入
IN_PLACE_FALLBACK_ERRNOS = frozenset({
    errno.EBUSY,
    errno.EXDEV,
    errno.EACCES,
    errno.EPERM,
})


class HostsFileManager:
    """
    把注册表渲染成托管块并写回 hosts 文件

    线程安全：sync() 全程持有锁，重叠的调用会排队而不是被丢弃。
    快照在拿到锁之后才读取，所以在此之前完成的注册表修改都会被写入。
    优先使用临时文件 + 重命名的原子性替换，失败时才退回原地覆盖。
    """

    def __init__(
        self,
        hosts_path: str,
        registry: ContainerRegistry,
        ip_address: str,
        logger: logging.Logger
    ):
        """
        初始化 hosts 文件管理器

        参数:
            hosts_path: hosts 文件路径
            registry: 容器注册表
            ip_address: 所有虚拟主机名指向的 IP
            logger: 日志记录器实例
        """
        self.hosts_path = Path(hosts_path)
        self.registry = registry
        self.ip_address = ip_address
        self.logger = logger
        self.lock = threading.Lock()

    def sync(self) -> str:
        """
        用当前注册表快照重写托管块

        返回:
            本次渲染的托管块

        异常:
            PermissionError: 如果没有读写 hosts 文件的权限
            OSError: 如果文件系统操作失败或文件不是有效的 UTF-8，文件保持本次同步前的状态
        """
        with self.lock:
            self.logger.debug(f"正在更新 hosts 文件 {self.hosts_path}")
            try:
                existing = self._read()
                block = hosts_block.render(
                    self.ip_address,
                    self.registry.snapshot()
                )
                new_content = hosts_block.apply(existing, block)

                if new_content == existing:
                    self.logger.debug("hosts 文件内容未变化，跳过写入")
                    return block

                self._write(new_content)
                self.logger.info(f"已写入托管块:\n{block.rstrip()}")

            except PermissionError:
                self.logger.error(
                    f"读写 hosts 文件权限被拒绝: {self.hosts_path}. "
                    "请确保当前用户具有适当的权限。"
                )
                raise
            except OSError as e:
                self.logger.error(f"更新 hosts 文件失败: {e}")
                raise

        return block

    def _read(self) -> str:
        # newline='' 保留原有的换行符，块外内容逐字节不变
        try:
            with open(self.hosts_path, 'r', encoding='utf-8', newline='') as f:
                return f.read()
        except UnicodeDecodeError as e:
            raise OSError(
                errno.EILSEQ,
                f"hosts 文件不是有效的 UTF-8 ({e.reason}, 位置 {e.start})",
                str(self.hosts_path)
            ) from e

    def _write(self, content: str) -> None:
        try:
            self._replace_atomically(content)
        except OSError as e:
            if e.errno not in IN_PLACE_FALLBACK_ERRNOS:
                raise
            self.logger.debug(
                f"无法原子性替换 {self.hosts_path} ({e.strerror})，改为原地写入"
            )
            self._write_in_place(content)

    def _replace_atomically(self, content: str) -> None:
        current = os.stat(self.hosts_path)

        # 写入临时文件（同一目录）
        temp_fd, temp_path = tempfile.mkstemp(
            dir=self.hosts_path.parent,
            prefix='.hosts.tmp.',
            text=True
        )

        try:
            with os.fdopen(temp_fd, 'w', encoding='utf-8', newline='') as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())

            # 保留原文件的权限和属主
            os.chmod(temp_path, stat.S_IMODE(current.st_mode))
            temp_stat = os.stat(temp_path)
            if (temp_stat.st_uid, temp_stat.st_gid) != (current.st_uid, current.st_gid):
                os.chown(temp_path, current.st_uid, current.st_gid)

            # 原子性替换（同一文件系统内有效）
            os.replace(temp_path, self.hosts_path)

        except Exception:
            # 出错时清理临时文件
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

    def _write_in_place(self, content: str) -> None:
        with open(self.hosts_path, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
