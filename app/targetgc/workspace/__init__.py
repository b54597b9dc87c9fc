"""Workspace resolution module.

This module finds the workspace a sweep runs for, its target directory,
and the units it wants built.
"""

from targetgc.workspace.manifest import Workspace, WorkspaceMember, find_manifest, load_workspace
from targetgc.workspace.resolver import CargoWorkspaceResolver, WorkspaceResolver
from targetgc.workspace.unit_graph import load_unit_graph_roots, parse_unit_graph

__all__ = [
    "CargoWorkspaceResolver",
    "Workspace",
    "WorkspaceMember",
    "WorkspaceResolver",
    "find_manifest",
    "load_unit_graph_roots",
    "load_workspace",
    "parse_unit_graph",
]
