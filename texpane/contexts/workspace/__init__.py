"""
Workspace Context

Responsibilities:
- Lists directory children for the file tree
- Performs file create/read/write/move/delete on behalf of the editor
- Watches directory trees and pushes change signals to the presentation layer

Owns: Filesystem access, watch sessions, change notification
Never: Compiles documents
"""

from texpane.contexts.workspace.exceptions import IOFailure, WatchSetupFailure
from texpane.contexts.workspace.file_tree import FileNode, list_directory, visible_nodes
from texpane.contexts.workspace.notifier import ChangeNotifier
from texpane.contexts.workspace.watcher import DirectoryWatcher, WatchSession

__all__ = [
    "ChangeNotifier",
    "DirectoryWatcher",
    "FileNode",
    "IOFailure",
    "WatchSession",
    "WatchSetupFailure",
    "list_directory",
    "visible_nodes",
]
