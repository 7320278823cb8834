# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""TaskGen: generates the C++ classes of components from their interface declaration."""
