"""
ipfs-node: local IPFS node that pins whatever lands in .local/ipfs-root/content
"""

import os
import time
import logging
import schedule

from ..ipfs.node import IpfsNode
from ..ipfs.watcher import ADD, ADD_DIR, CHANGE, UNLINK, UNLINK_DIR, ContentWatcher
from .common import argument, task

logger = logging.getLogger(__name__)

EVENT_MESSAGES = {
    ADD: "File {} has been added",
    CHANGE: "File {} has been changed",
    UNLINK: "File {} has been removed",
    ADD_DIR: "Directory {} has been added",
    UNLINK_DIR: "Directory {} has been removed",
}


def pinning_handler(node: IpfsNode, content_directory: str):
    """Watcher callback that re-adds added or changed files to IPFS"""
    def handle(event, path):
        logger.info(EVENT_MESSAGES[event].format(path))
        if event in (ADD, CHANGE):
            with open(path, 'rb') as f:
                content = f.read()
            cid = node.add(os.path.relpath(path, content_directory).replace(os.sep, "/"), content)
            print(f"File CID: {cid}")
    return handle


@task("ipfs-node", "Starts an IPFS server with auto-watch over the file system",
      failure_message="There was an error running the IPFS node:")
@argument("--interval", type=float, default=1.0, help="Seconds between content directory scans")
def ipfs_node(context, args):
    root = os.path.join(context.project_root, ".local", "ipfs-root")
    content_directory = os.path.join(root, "content")
    repo_directory = os.path.join(root, "repo")
    os.makedirs(content_directory, exist_ok=True)
    os.makedirs(repo_directory, exist_ok=True)

    settings = context.settings
    node = IpfsNode(repo_directory, settings.ipfs_binary, settings.ipfs_api_port,
                    settings.ipfs_gateway_port, settings.ipfs_swarm_port, settings.ipfs_api_url)
    node.initialize()
    node.start()
    print("IPFS server started")

    watcher = ContentWatcher(content_directory, pinning_handler(node, content_directory))
    scheduler = schedule.Scheduler()
    scheduler.every(args.interval).seconds.do(watcher.scan)

    try:
        watcher.scan()
        print(f"Watching {content_directory}. Press Ctrl+C to stop the IPFS server...")
        while True:
            scheduler.run_pending()
            time.sleep(0.2)
    except KeyboardInterrupt:
        logger.info("Stopping on user request")
    finally:
        scheduler.clear()
        node.stop()
        print("IPFS server stopped")
