#!/usr/bin/env python3
"""
Docker Vhoster - 主入口点

从源码目录直接运行: python main.py
"""

from vhoster.cli import main


if __name__ == '__main__':
    main()
