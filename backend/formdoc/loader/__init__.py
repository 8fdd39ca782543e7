"""
加载层 - 把持久层数据组装为表单快照
"""

from .snapshot_loader import SnapshotLoader

__all__ = ["SnapshotLoader"]
