"""
Docker Vhoster - 根据容器声明的虚拟主机名自动维护 hosts 文件
"""

__version__ = "1.0.0"
__author__ = "Docker Vhoster Project"

from vhoster.app import DockerVhoster
from vhoster.config import Config
from vhoster.models import ContainerRecord
from vhoster.registry import ContainerRegistry

__all__ = ["DockerVhoster", "Config", "ContainerRecord", "ContainerRegistry"]
