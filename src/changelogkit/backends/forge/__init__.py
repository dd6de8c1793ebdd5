# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Forge backends: sources of tags and commits."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from changelogkit.backends.forge.github_api import GitHubAPIBackend as GitHubAPIBackend
from changelogkit.commit_range import TagLookup
from changelogkit.fetch import CommitPageSource

__all__ = [
    'Forge',
    'GitHubAPIBackend',
]


@runtime_checkable
class Forge(TagLookup, CommitPageSource, Protocol):
    """Everything the pipeline needs from a code forge.

    A forge lists the most recent tags (for single-tag range resolution)
    and serves the commits between two refs one page at a time.
    """
