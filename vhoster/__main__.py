"""
支持 python -m vhoster
"""

from vhoster.cli import main

main()
