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
ZipBomb Evaluator - Recursive zip bomb detection for archives and office documents.
"""

try:
    from ._version import __version__
except ImportError:
    __version__ = "0.0.0+unknown"

__author__ = "Cisco Systems, Inc."


def __getattr__(name: str):
    """Lazy-load public API symbols on first access.

    This avoids importing the document parser libraries (openpyxl,
    python-docx, python-pptx, pypdf) when the package is merely *imported*.
    """
    _lazy_map = {
        "Config": (".config.config", "Config"),
        "ZipBombEvaluatorConstants": (".config.constants", "ZipBombEvaluatorConstants"),
        "ZipBombEvaluator": (".core.evaluator", "ZipBombEvaluator"),
        "DocumentSecurityFilter": (".core.security_filter", "DocumentSecurityFilter"),
        "LimitPolicy": (".core.limit_policy", "LimitPolicy"),
        "EvaluationOutcome": (".core.models", "EvaluationOutcome"),
        "EvaluationReport": (".core.models", "EvaluationReport"),
        "EvaluationStatus": (".core.models", "EvaluationStatus"),
        "ParserFailure": (".core.models", "ParserFailure"),
        "classify_failure": (".core.classifier", "classify_failure"),
        "DocumentSecurityError": (".core.exceptions", "DocumentSecurityError"),
        "PolicyError": (".core.exceptions", "PolicyError"),
        "ZipBombEvaluatorError": (".core.exceptions", "ZipBombEvaluatorError"),
    }
    if name in _lazy_map:
        module_path, attr = _lazy_map[name]
        import importlib

        mod = importlib.import_module(module_path, __package__)
        val = getattr(mod, attr)
        # Cache on the module so __getattr__ is only called once per symbol
        globals()[name] = val
        return val
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ZipBombEvaluator",
    "DocumentSecurityFilter",
    "LimitPolicy",
    "EvaluationOutcome",
    "EvaluationReport",
    "EvaluationStatus",
    "ParserFailure",
    "classify_failure",
    "DocumentSecurityError",
    "PolicyError",
    "ZipBombEvaluatorError",
    "Config",
    "ZipBombEvaluatorConstants",
]
