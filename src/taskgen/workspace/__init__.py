# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Workspace configuration for TaskGen."""

from taskgen.workspace.config import (
    WORKSPACE_CONFIG_NAME,
    PackageImport,
    WorkspaceConfig,
    WorkspaceConfigError,
    load_workspace_config,
)

__all__ = [
    "WORKSPACE_CONFIG_NAME",
    "PackageImport",
    "WorkspaceConfig",
    "WorkspaceConfigError",
    "load_workspace_config",
]
