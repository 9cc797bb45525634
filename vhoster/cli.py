"""
Docker Vhoster 命令行入口

根据运行中容器声明的虚拟主机名自动维护 hosts 文件中的托管块。
"""

import signal
import sys
from typing import Optional, Sequence

from vhoster.app import DockerVhoster
from vhoster.config import Config
from vhoster.preflight import PreflightError

# 与 shell 的约定一致: 128 + 信号编号
EXIT_CODES = {
    signal.SIGINT: 130,
    signal.SIGTERM: 143,
}


def main(argv: Optional[Sequence[str]] = None) -> None:
    """主入口点，带信号处理"""

    # 从环境变量和命令行参数加载配置
    try:
        config = Config.from_args(argv)
        vhoster = DockerVhoster(config)
    except ValueError as e:
        print(f"配置无效: {e}", file=sys.stderr)
        sys.exit(1)

    # 收到信号立即退出，不做最后一次同步：下次启动会全量重新同步
    def signal_handler(signum: int, frame) -> None:
        """处理关闭信号"""
        signal_name = signal.Signals(signum).name
        vhoster.logger.info(f"收到信号 {signal_name}，正在退出...")
        sys.exit(EXIT_CODES.get(signum, 1))

    # 注册信号处理器
    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    # 运行应用
    try:
        vhoster.run()
    except PreflightError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        vhoster.logger.error(f"致命错误: {e}", exc_info=True)
        sys.exit(1)

    vhoster.stop()
    sys.exit(0)
