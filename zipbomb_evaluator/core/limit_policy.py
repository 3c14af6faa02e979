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
Limit policy: the thresholds that decide when an archive is a bomb.

A ``LimitPolicy`` is an immutable value handed to the evaluator at
construction time.  Different hosts have different tolerances, so the
thresholds ship as YAML presets and can be overridden per deployment.

Usage
-----
    from zipbomb_evaluator.core.limit_policy import LimitPolicy

    # Built-in defaults (100:1 ratio, 1 GiB entry, 10 GiB total, depth 10)
    policy = LimitPolicy.default()

    # Named preset
    policy = LimitPolicy.from_preset("strict")

    # Org policy (merged on top of defaults)
    policy = LimitPolicy.from_yaml("limits.yaml")

    # Dump the current policy for editing
    policy.to_yaml("generated_limits.yaml")
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from .exceptions import PolicyError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Where the built-in policies live (ships with the package)
# ---------------------------------------------------------------------------
_DATA_DIR = Path(__file__).resolve().parent.parent / "data"
_DEFAULT_POLICY_PATH = _DATA_DIR / "default_policy.yaml"

_PRESET_POLICIES: dict[str, Path] = {
    "strict": _DATA_DIR / "strict_policy.yaml",
    "balanced": _DEFAULT_POLICY_PATH,
    "permissive": _DATA_DIR / "permissive_policy.yaml",
}

KIB = 1024
MIB = 1024 * KIB
GIB = 1024 * MIB

DEFAULT_RECURSABLE_EXTENSIONS = frozenset(
    {
        # Archives
        "zip",
        "jar",
        "war",
        "ear",
        # Zip-based office
        "xlsx",
        "docx",
        "pptx",
        "ods",
        "odt",
        "odp",
        # Legacy office
        "xls",
        "doc",
        "ppt",
        # PDF
        "pdf",
    }
)

# Environment variable -> policy field
_ENV_OVERRIDES: dict[str, str] = {
    "ZIPBOMB_MAX_COMPRESSION_RATIO": "max_compression_ratio",
    "ZIPBOMB_MAX_ENTRY_SIZE": "max_entry_size_bytes",
    "ZIPBOMB_MAX_TOTAL_SIZE": "max_total_size_bytes",
    "ZIPBOMB_MAX_DEPTH": "max_recursion_depth",
    "ZIPBOMB_MAX_EXTRACT_SIZE": "max_extract_size_bytes",
}

_INT_FIELDS = (
    "max_compression_ratio",
    "max_entry_size_bytes",
    "max_total_size_bytes",
    "max_recursion_depth",
    "max_extract_size_bytes",
    "extract_chunk_size",
)


def normalize_extension(ext: str) -> str:
    """Lowercase an extension and strip any leading dot."""
    return ext.strip().lower().lstrip(".")


@dataclass(frozen=True)
class LimitPolicy:
    """Hard limits enforced while evaluating an archive tree."""

    policy_name: str = "default"
    policy_version: str = "1.0"

    max_compression_ratio: int = 100
    max_entry_size_bytes: int = 1 * GIB
    max_total_size_bytes: int = 10 * GIB
    # Depth 0 is the top-level file; depth max_recursion_depth + 1 is rejected
    max_recursion_depth: int = 10
    # Bytes physically copied out of one nested entry
    max_extract_size_bytes: int = 100 * MIB
    extract_chunk_size: int = 8 * KIB
    recursable_extensions: frozenset[str] = field(default=DEFAULT_RECURSABLE_EXTENSIONS)

    def __post_init__(self):
        for name in _INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise PolicyError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise PolicyError(f"{name} must not be negative, got {value}")
        if self.extract_chunk_size == 0:
            raise PolicyError("extract_chunk_size must be positive")
        object.__setattr__(
            self,
            "recursable_extensions",
            frozenset(normalize_extension(e) for e in self.recursable_extensions if e),
        )

    def is_recursable(self, extension: str) -> bool:
        return normalize_extension(extension) in self.recursable_extensions

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def default(cls) -> LimitPolicy:
        """Load the built-in default policy that ships with the package."""
        return cls.from_yaml(_DEFAULT_POLICY_PATH)

    @classmethod
    def from_preset(cls, name: str) -> LimitPolicy:
        """Load a named preset policy: ``strict``, ``balanced``, or ``permissive``."""
        name_lower = name.lower()
        if name_lower not in _PRESET_POLICIES:
            raise PolicyError(f"Unknown preset '{name}'. Available: {', '.join(sorted(_PRESET_POLICIES))}")
        return cls.from_yaml(_PRESET_POLICIES[name_lower])

    @classmethod
    def preset_names(cls) -> list[str]:
        """Return available preset policy names."""
        return sorted(_PRESET_POLICIES.keys())

    @classmethod
    def from_yaml(cls, path: str | Path) -> LimitPolicy:
        """
        Load a policy from a YAML file.

        The YAML is merged on top of the built-in defaults so that users
        only need to specify the limits they want to change.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Policy file not found: {path}")

        try:
            with open(path) as fh:
                raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as e:
            raise PolicyError(f"Invalid policy YAML in {path}: {e}") from e

        if not isinstance(raw, dict):
            raise PolicyError(f"Policy file {path} must contain a mapping at the top level")

        if path.resolve() != _DEFAULT_POLICY_PATH.resolve():
            raw = {**cls._load_default_raw(), **raw}

        policy = cls._from_dict(raw)
        logger.debug("Loaded limit policy %s from %s", policy.policy_name, path)
        return policy

    def with_env_overrides(self, environ: dict[str, str] | None = None) -> LimitPolicy:
        """Return a copy with ``ZIPBOMB_*`` environment variables applied."""
        env = os.environ if environ is None else environ
        changes: dict[str, int] = {}
        for var, attr in _ENV_OVERRIDES.items():
            value = env.get(var)
            if value is None or value == "":
                continue
            try:
                changes[attr] = int(value)
            except ValueError as e:
                raise PolicyError(f"{var} must be an integer, got {value!r}") from e
        if not changes:
            return self
        logger.info("Applying limit overrides from environment: %s", ", ".join(sorted(changes)))
        return replace(self, **changes)

    def to_yaml(self, path: str | Path) -> None:
        """Dump the full policy to a YAML file for editing."""
        with open(path, "w") as fh:
            fh.write("# ZipBomb Evaluator - Limit Policy\n")
            fh.write("# Only include the limits you want to override; omitted keys\n")
            fh.write("# will use the built-in defaults.\n\n")
            yaml.dump(self.to_dict(), fh, default_flow_style=False, sort_keys=False, width=120)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["recursable_extensions"] = sorted(self.recursable_extensions)
        return data

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @classmethod
    def _load_default_raw(cls) -> dict[str, Any]:
        if _DEFAULT_POLICY_PATH.exists():
            with open(_DEFAULT_POLICY_PATH) as fh:
                return yaml.safe_load(fh) or {}
        return {}

    @classmethod
    def _from_dict(cls, d: dict[str, Any]) -> LimitPolicy:
        known = {f for f in cls.__dataclass_fields__}
        unknown = sorted(set(d) - known)
        if unknown:
            logger.warning("Ignoring unknown policy keys: %s", ", ".join(unknown))

        kwargs = {k: v for k, v in d.items() if k in known}
        if "recursable_extensions" in kwargs:
            exts = kwargs["recursable_extensions"] or []
            if isinstance(exts, str):
                exts = exts.split(",")
            kwargs["recursable_extensions"] = frozenset(str(e) for e in exts)
        for name in ("policy_name", "policy_version"):
            if name in kwargs:
                kwargs[name] = str(kwargs[name])
        try:
            return cls(**kwargs)
        except TypeError as e:
            raise PolicyError(f"Invalid policy: {e}") from e
