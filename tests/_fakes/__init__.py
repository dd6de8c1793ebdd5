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

"""Shared test fakes for changelogkit.

Provides reusable fake implementations of the Forge, ChatBackend and
ArtifactSink protocols so that individual test modules don't need to
duplicate boilerplate classes.

Usage::

    from tests._fakes import FakeChat, FakeForge, MemorySink, raw

    forge = FakeForge(tags=['v1.2.0', 'v1.1.0'], commits=[raw('feat: add x')])
    chat = FakeChat(failing={'C_BAD'})
"""

from tests._fakes._chat import FakeChat as FakeChat
from tests._fakes._forge import FakeForge as FakeForge, raw as raw
from tests._fakes._sink import MemorySink as MemorySink

__all__ = [
    'FakeChat',
    'FakeForge',
    'MemorySink',
    'raw',
]
