# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Loading of mirror declaration files."""

from archwith.config.mirror_file import (
    MirrorFile,
    MirrorFileError,
    load_mirror_file,
    parse_mirror_file,
)

__all__ = [
    "MirrorFile",
    "MirrorFileError",
    "load_mirror_file",
    "parse_mirror_file",
]
