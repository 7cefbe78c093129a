"""
Polling file-system watcher for the IPFS content directory
"""

import os
import logging
from typing import Callable, Dict, Tuple

logger = logging.getLogger(__name__)

# path -> (is_directory, modification time, size)
Snapshot = Dict[str, Tuple[bool, float, int]]

ADD = "add"
CHANGE = "change"
UNLINK = "unlink"
ADD_DIR = "addDir"
UNLINK_DIR = "unlinkDir"


class ContentWatcher:
    """
    Reports file and directory changes below a directory.

    Each scan() compares the tree against the previous scan and invokes the
    callback with (event, absolute path). The first scan reports every
    existing entry as added.
    """

    def __init__(self, directory: str, callback: Callable[[str, str], None]):
        self.directory = os.path.abspath(directory)
        self.callback = callback
        self.snapshot: Snapshot = {}
        self.ready = False

    def take_snapshot(self) -> Snapshot:
        snapshot = {}
        for current, subdirs, files in os.walk(self.directory):
            subdirs.sort()
            for name in subdirs:
                snapshot[os.path.join(current, name)] = (True, 0.0, 0)
            for name in sorted(files):
                path = os.path.join(current, name)
                try:
                    stat = os.stat(path)
                except FileNotFoundError:
                    continue
                snapshot[path] = (False, stat.st_mtime, stat.st_size)
        return snapshot

    def scan(self):
        current = self.take_snapshot()
        previous = self.snapshot

        for path, (is_dir, mtime, size) in current.items():
            before = previous.get(path)
            if before is None:
                self._emit(ADD_DIR if is_dir else ADD, path)
            elif not is_dir and before[1:] != (mtime, size):
                self._emit(CHANGE, path)

        for path, (is_dir, _, _) in previous.items():
            if path not in current:
                self._emit(UNLINK_DIR if is_dir else UNLINK, path)

        self.snapshot = current
        if not self.ready:
            self.ready = True
            logger.info("Initial scan complete. Ready for changes")

    def _emit(self, event: str, path: str):
        try:
            self.callback(event, path)
        except Exception as e:
            logger.error(f"Watcher error on {event} {path}: {e}")

