# Copyright 2026 Cisco Systems, Inc.
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

"""
Configuration class for ZipBomb Evaluator.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from ..core.limit_policy import LimitPolicy
from .constants import ZipBombEvaluatorConstants


@dataclass
class Config:
    """
    Process-level configuration for ZipBomb Evaluator.

    The limit thresholds themselves live in a :class:`LimitPolicy`; this class
    only says which policy to load and how the process should behave.
    """

    # Policy: preset name ("strict", "balanced", "permissive") or path to a YAML file
    policy: str | None = None
    apply_env_overrides: bool = True

    # Extraction
    temp_dir: str | None = None

    # Output Options
    log_level: str = ZipBombEvaluatorConstants.DEFAULT_LOG_LEVEL
    output_format: str = ZipBombEvaluatorConstants.DEFAULT_OUTPUT_FORMAT

    def __post_init__(self):
        """Load configuration from environment variables if not provided."""

        if self.policy is None:
            self.policy = os.getenv("ZIPBOMB_POLICY")

        if self.temp_dir is None:
            self.temp_dir = os.getenv("ZIPBOMB_TEMP_DIR")

        # Log level from environment (only if still at default)
        if self.log_level == ZipBombEvaluatorConstants.DEFAULT_LOG_LEVEL:
            if env_level := os.getenv("ZIPBOMB_LOG_LEVEL"):
                self.log_level = env_level.upper()

        if os.getenv("ZIPBOMB_DISABLE_ENV_OVERRIDES", "").lower() in ("true", "1"):
            self.apply_env_overrides = False

    def load_policy(self) -> LimitPolicy:
        """
        Resolve the configured policy.

        Returns:
            The preset or YAML policy (built-in defaults when none is configured),
            with ``ZIPBOMB_*`` limit overrides applied unless disabled
        """
        if not self.policy:
            policy = LimitPolicy.default()
        elif self.policy.lower() in LimitPolicy.preset_names():
            policy = LimitPolicy.from_preset(self.policy)
        else:
            policy = LimitPolicy.from_yaml(Path(self.policy))

        if self.apply_env_overrides:
            policy = policy.with_env_overrides()
        return policy

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create configuration from environment variables.

        Returns:
            Config instance with values from environment
        """
        return cls()
