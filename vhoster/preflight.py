"""
启动前检查：hosts 文件读写权限和 Docker socket
"""

import os
from pathlib import Path
from typing import Optional


class PreflightError(Exception):
    """启动前检查失败，进程应带着说明信息退出"""


def file_permissions_help(host_file_location: str) -> str:
    return f"""hosts 文件 `{host_file_location}` 的权限必须允许当前用户修改。

请确认以下几点:
  1. 文件 {host_file_location} 存在（在 docker 中运行时需要以卷的方式挂载）
  2. 运行的用户有权限访问该文件
  3. 在 Mac 和 Windows 上，hosts 文件受 ACL 保护，需要为当前用户添加 ACL 规则。
     在 Mac 上可以执行:
     `sudo chmod +a "user:$(whoami) allow read,write,append,readattr,writeattr,readextattr,writeextattr,readsecurity" /etc/hosts`
     Windows 的设置方法见 README

如需使用其他路径，请设置 `HOST_FILE_LOCATION` 环境变量或传入 `-f` 参数。
"""


def check_hosts_file_access(host_file_location: str) -> None:
    """
    检查 hosts 文件是否可读写

    只读取内容并检查写权限，不修改文件。

    异常:
        PreflightError: 文件不存在或无法读写
    """
    path = Path(host_file_location)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            f.read()
        # 以追加模式打开不会改动内容
        with open(path, 'a', encoding='utf-8'):
            pass
    except (OSError, UnicodeDecodeError) as e:
        raise PreflightError(
            f"无法访问 {host_file_location}: {e}\n\n"
            + file_permissions_help(host_file_location)
        ) from e


def check_docker_socket(socket_path: Optional[str]) -> None:
    """
    检查 Docker unix socket 是否存在

    参数:
        socket_path: socket 路径，None 表示使用远程地址，跳过检查

    异常:
        PreflightError: socket 不存在
    """
    if socket_path is None:
        return
    if not os.path.exists(socket_path):
        raise PreflightError(
            f"找不到 unix socket `{socket_path}`。可能缺少对应的卷挂载。"
        )
