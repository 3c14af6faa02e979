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

"""Command-line interface for the ZipBomb Evaluator."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from ..config.config import Config
from ..config.constants import ZipBombEvaluatorConstants
from ..core.evaluator import ZipBombEvaluator
from ..core.exceptions import PolicyError
from ..core.limit_policy import LimitPolicy
from ..core.models import EvaluationReport

logger = logging.getLogger("zipbomb_evaluator.cli")


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _configure_logging(args: argparse.Namespace, config: Config) -> None:
    if getattr(args, "verbose", False):
        level = logging.DEBUG
    elif getattr(args, "quiet", False):
        level = logging.ERROR
    else:
        level = getattr(logging, str(config.log_level).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _load_policy(args: argparse.Namespace, config: Config) -> LimitPolicy | None:
    """Load the limit policy from ``--policy`` or the configuration; ``None`` on error."""
    policy_value = getattr(args, "policy", None)
    if policy_value:
        config.policy = policy_value
    try:
        policy = config.load_policy()
    except FileNotFoundError:
        print(f"Error: Policy file not found: {config.policy}", file=sys.stderr)
        return None
    except PolicyError as e:
        print(f"Error loading policy: {e}", file=sys.stderr)
        return None
    logger.info("Using limit policy: %s", policy.policy_name)
    return policy


def _format_output(args: argparse.Namespace, report: EvaluationReport) -> str:
    if args.format == "json":
        return json.dumps(report.to_dict(), indent=2)
    return _generate_summary(report)


def _write_output(args: argparse.Namespace, output: str) -> None:
    """Write *output* to a file or stdout."""
    if args.output:
        with open(args.output, "w", encoding="utf-8") as fh:
            fh.write(output)
        print(f"Report saved to: {args.output}", file=sys.stderr)
    else:
        print(output)


def _generate_summary(report: EvaluationReport) -> str:
    lines = [outcome.summary() for outcome in report.outcomes]
    lines += [
        "",
        "=" * 60,
        f"Files Evaluated: {report.total_files}",
        f"Passed: {report.passed_count}",
        f"Flagged: {report.flagged_count}",
        "=" * 60,
    ]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def scan_command(args: argparse.Namespace) -> int:
    """Handle the ``scan`` command."""
    config = Config(output_format=args.format)
    _configure_logging(args, config)

    policy = _load_policy(args, config)
    if policy is None:
        return ZipBombEvaluatorConstants.EXIT_ERROR

    paths: list[Path] = []
    for name in args.files:
        path = Path(name)
        if not path.exists():
            print(f"Skipping: {name} (file not found)", file=sys.stderr)
        elif not path.is_file():
            print(f"Skipping: {name} (not a regular file)", file=sys.stderr)
        else:
            paths.append(path)

    evaluator = ZipBombEvaluator(policy, temp_dir=config.temp_dir)
    report = evaluator.evaluate_many(paths)
    _write_output(args, _format_output(args, report))

    if report.has_threats:
        return ZipBombEvaluatorConstants.EXIT_FLAGGED
    return ZipBombEvaluatorConstants.EXIT_CLEAN


def generate_policy_command(args: argparse.Namespace) -> int:
    """Handle the ``generate-policy`` command."""
    output_path = Path(args.output)
    preset = getattr(args, "preset", "balanced")
    try:
        policy = LimitPolicy.from_preset(preset)
        policy.to_yaml(output_path)
        print(f"Generated {preset} limit policy: {output_path}\n")
        print("Edit the file to customise, then use:")
        print(f"  zipbomb-evaluator scan --policy {output_path} FILE...\n")
        print("Available presets: strict | balanced (default) | permissive")
        return 0
    except (OSError, PolicyError) as e:
        print(f"Error generating policy: {e}", file=sys.stderr)
        return 1


def show_limits_command(args: argparse.Namespace) -> int:
    """Handle the ``show-limits`` command."""
    config = Config()
    policy = _load_policy(args, config)
    if policy is None:
        return ZipBombEvaluatorConstants.EXIT_ERROR

    print(f"Limit policy: {policy.policy_name} (version {policy.policy_version})\n")
    print(f"  Max compression ratio:   {policy.max_compression_ratio}:1")
    print(f"  Max entry size:          {policy.max_entry_size_bytes:,} bytes")
    print(f"  Max total size:          {policy.max_total_size_bytes:,} bytes")
    print(f"  Max recursion depth:     {policy.max_recursion_depth}")
    print(f"  Max extraction size:     {policy.max_extract_size_bytes:,} bytes")
    print(f"  Extraction chunk size:   {policy.extract_chunk_size:,} bytes")
    print(f"  Recursable extensions:   {', '.join(sorted(policy.recursable_extensions))}")
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="zipbomb-evaluator",
        description="ZipBomb Evaluator - Recursive zip bomb detection for archives and office documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  zipbomb-evaluator scan upload.zip report.xlsx
  zipbomb-evaluator scan upload.zip --policy strict --format json
  zipbomb-evaluator generate-policy -o my_limits.yaml
  zipbomb-evaluator show-limits --policy permissive
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {ZipBombEvaluatorConstants.VERSION}")
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # -- scan --------------------------------------------------------------
    scan_p = subparsers.add_parser("scan", help="Evaluate one or more files for zip bombs")
    scan_p.add_argument("files", nargs="+", metavar="FILE", help="Files to evaluate")
    scan_p.add_argument(
        "--policy",
        metavar="PRESET_OR_PATH",
        help="Limit policy: preset name (strict, balanced, permissive) or path to custom YAML",
    )
    scan_p.add_argument(
        "--format",
        choices=list(ZipBombEvaluatorConstants.OUTPUT_FORMATS),
        default=ZipBombEvaluatorConstants.DEFAULT_OUTPUT_FORMAT,
        help="Output format (default: summary)",
    )
    scan_p.add_argument("--output", "-o", help="Output file path")
    verbosity = scan_p.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    verbosity.add_argument("--quiet", "-q", action="store_true", help="Only log errors")

    # -- generate-policy ---------------------------------------------------
    gp_p = subparsers.add_parser("generate-policy", help="Generate a limit policy YAML")
    gp_p.add_argument("--output", "-o", default="zipbomb_limits.yaml", help="Output file path")
    gp_p.add_argument(
        "--preset", choices=LimitPolicy.preset_names(), default="balanced", help="Base preset (default: balanced)"
    )

    # -- show-limits -------------------------------------------------------
    sl_p = subparsers.add_parser("show-limits", help="Show the effective limits")
    sl_p.add_argument("--policy", metavar="PRESET_OR_PATH", help="Preset name or path to custom YAML")

    # -- dispatch ----------------------------------------------------------
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    dispatch = {
        "scan": scan_command,
        "generate-policy": generate_policy_command,
        "show-limits": show_limits_command,
    }
    handler = dispatch.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
