# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Projects, typekits, package discovery and dependency resolution."""

from taskgen.project.loader import ProjectDescription, load_project, load_project_file
from taskgen.project.packages import PROJECT_FILE_NAME, LocalPackageResolver, PackageInfo, PackageResolver
from taskgen.project.project import Delegating, Owning, ProjectModel, ProjectView
from taskgen.project.resolver import DependencyResolver
from taskgen.project.typekit import OpaqueDef, Typekit, VirtualTypekit, parse_typelist, serialize_typelist

__all__ = [
    "PROJECT_FILE_NAME",
    "PackageInfo",
    "PackageResolver",
    "LocalPackageResolver",
    "OpaqueDef",
    "Typekit",
    "VirtualTypekit",
    "parse_typelist",
    "serialize_typelist",
    "Owning",
    "Delegating",
    "ProjectView",
    "ProjectModel",
    "DependencyResolver",
    "ProjectDescription",
    "load_project",
    "load_project_file",
]
