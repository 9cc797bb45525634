"""
hosts 文件托管块的纯文本处理（不涉及任何 I/O）
"""

from typing import Iterable, Optional, Tuple

from vhoster.models import ContainerRecord

BLOCK_START = "# docker-vhoster managed block"
BLOCK_END = "# docker-vhoster block end"


def render(ip_address: str, records: Iterable[ContainerRecord]) -> str:
    """
    渲染托管块

    每个容器的每个主机名一行 "<IP> <主机名>"，首尾是标记行。
    注册表为空时仍然输出只有标记行的块。

    参数:
        ip_address: 所有主机名指向的 IP
        records: 注册表快照

    返回:
        以换行结尾的托管块文本
    """
    lines = [BLOCK_START]
    for record in records:
        lines.extend(record.to_hosts_lines(ip_address))
    lines.append(BLOCK_END)
    return '\n'.join(lines) + '\n'


def find_block(text: str) -> Optional[Tuple[int, int]]:
    """
    定位已有的托管块

    取第一个结束标记之前最近的起始标记。

    返回:
        (起始偏移, 结束偏移)，结束偏移包含结束标记行的换行符；
        任一标记缺失时返回 None
    """
    start = None
    offset = 0
    while offset < len(text):
        newline = text.find('\n', offset)
        line_end = len(text) if newline == -1 else newline + 1
        content = text[offset:line_end].rstrip('\r\n')
        if content == BLOCK_START:
            # 没有结束标记的旧起始标记不算块的一部分
            start = offset
        elif start is not None and content == BLOCK_END:
            return start, line_end
        offset = line_end
    return None


def apply(existing: str, block: str) -> str:
    """
    用新的托管块替换文件内容中的旧块

    两个标记都存在时只替换标记之间（含标记行）的内容，其余部分逐字节保留；
    否则在文件末尾追加一个空行和整个块。

    参数:
        existing: 当前文件内容
        block: render() 生成的托管块

    返回:
        新的文件内容
    """
    span = find_block(existing)
    if span is not None:
        start, end = span
        return existing[:start] + block + existing[end:]

    if not existing:
        return block
    if not existing.endswith('\n'):
        existing += '\n'
    return existing + '\n' + block
