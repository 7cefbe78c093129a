"""
Local IPFS node with automatic pinning of a watched content directory
"""

from .node import IpfsNode
from .watcher import ContentWatcher

__all__ = ['IpfsNode', 'ContentWatcher']
