"""
Command-line interface for the security agent.

Runs the remediation pipeline as a CI gate, scans files for
vulnerability patterns, and creates configuration files.
"""

import argparse
import logging
import sys
import os
from typing import Optional, List

from rich.console import Console
from rich.logging import RichHandler

from securityagent import __version__
from securityagent.backends import get_backend
from securityagent.config import AgentConfig, load_agent_config, create_default_config
from securityagent.core.changes import ChangeSetResolver, filter_paths
from securityagent.core.detector import VulnerabilityDetector
from securityagent.core.findings import (
    Category, EXIT_CLEAN, EXIT_FATAL, EXIT_INTERRUPTED,
)
from securityagent.core.pipeline import PipelineDriver
from securityagent.exceptions import SecurityAgentError
from securityagent.formatters import get_formatter
from securityagent.utils import iter_source_files

logger = logging.getLogger("securityagent")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="securityagent",
        description="AI-assisted remediation of injection and secret-exposure vulnerabilities in changed files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  securityagent fix                             # Remediate files changed vs origin/main
  securityagent fix --base-ref develop          # Compare against another branch
  securityagent fix --provider ollama           # Use a local Ollama model
  securityagent fix app.js --dry-run            # Show fixes without writing
  securityagent scan                            # Detection only, whole tree
  securityagent scan --changed --format json    # Detection only, changed files
  securityagent init                            # Create config file

Exit codes (fix):
  0  nothing to remediate
  1  fatal configuration error
  2  files were remediated; re-run validation and commit
  3  file errors with --fail-on-error and nothing remediated
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-c", "--config",
        help="Path to configuration file",
    )
    common.add_argument(
        "--root",
        default=".",
        help="Repository root (default: current directory)",
    )
    common.add_argument(
        "--base-ref",
        help="Base branch to diff against (default: $GITHUB_BASE_REF or main)",
    )
    common.add_argument(
        "--category",
        action="append",
        choices=[c.value for c in Category],
        help="Restrict detection to a category (can be specified multiple times)",
    )
    common.add_argument(
        "-f", "--format",
        choices=["text", "json"],
        help="Output format (default: text)",
    )
    common.add_argument(
        "-o", "--output",
        help="Output file (default: stdout)",
    )
    common.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output and debug logging",
    )
    common.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    # Fix command
    fix_parser = subparsers.add_parser(
        "fix", parents=[common], help="Detect and remediate vulnerabilities in changed files",
    )
    fix_parser.add_argument(
        "paths",
        nargs="*",
        help="Explicit files to process instead of the git change set",
    )
    fix_parser.add_argument(
        "--provider",
        choices=["gemini", "ollama", "local"],
        help="Generative backend (default: $AI_PROVIDER or gemini)",
    )
    fix_parser.add_argument(
        "--model",
        help="Model identifier for the selected provider",
    )
    fix_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show fixes without applying them",
    )
    fix_parser.add_argument(
        "--fail-on-error",
        action="store_true",
        help="Exit with 3 when a file errored and nothing was remediated",
    )

    # Scan command
    scan_parser = subparsers.add_parser(
        "scan", parents=[common], help="Detect vulnerability patterns without remediation",
    )
    scan_parser.add_argument(
        "paths",
        nargs="*",
        help="Files to scan (default: every source file under the root)",
    )
    scan_parser.add_argument(
        "--changed",
        action="store_true",
        help="Scan only files changed against the base reference",
    )

    # Init command
    init_parser = subparsers.add_parser("init", help="Create a configuration file")
    init_parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Overwrite existing config file",
    )

    return parser


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Send log records to stderr through rich so stdout stays machine-readable."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False, markup=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_config(args: argparse.Namespace) -> AgentConfig:
    """Load configuration and apply command-line overrides."""
    config = load_agent_config(args.config, start_dir=args.root)
    config.root = args.root

    if args.base_ref:
        config.base_ref = args.base_ref
    if args.category:
        config.categories = list(args.category)
    if args.format:
        config.output_format = args.format

    if getattr(args, "provider", None):
        config.provider = args.provider
    if getattr(args, "model", None):
        if config.provider.lower() == "gemini":
            config.gemini_model = args.model
        else:
            config.ollama_model = args.model
    if getattr(args, "dry_run", False):
        config.dry_run = True
    if getattr(args, "fail_on_error", False):
        config.fail_on_error = True

    return config


def write_output(output: str, path: Optional[str]) -> None:
    if path:
        with open(path, "w", encoding="utf-8") as f:
            f.write(output)
        logger.info("Results written to %s", path)
    else:
        print(output)


def cmd_fix(args: argparse.Namespace) -> int:
    """Execute the fix command."""
    config = build_config(args)
    config.validate()

    logger.debug("Configuration: %s", config.to_dict())

    with get_backend(config) as backend:
        driver = PipelineDriver(config, backend)
        outcome = driver.run(args.paths or None)

    formatter = get_formatter(config.output_format, verbose=args.verbose, use_color=not args.no_color)
    write_output(formatter.format_outcome(outcome, config.fail_on_error), args.output)

    return outcome.exit_code(config.fail_on_error)


def cmd_scan(args: argparse.Namespace) -> int:
    """Execute the scan command."""
    config = build_config(args)
    detector = VulnerabilityDetector(config.enabled_categories)

    if args.changed:
        paths = ChangeSetResolver(
            root=config.root,
            base_ref=config.base_ref,
            remote=config.remote,
            extensions=config.extensions,
            exclude_paths=config.exclude_paths,
        ).resolve()
    elif args.paths:
        paths = filter_paths(args.paths, config.extensions, config.exclude_paths)
    else:
        paths = tuple(iter_source_files(config.root, config.extensions, config.exclude_paths))

    verdicts = []
    for path in paths:
        try:
            with open(os.path.join(config.root, path), "r", encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping unreadable file %s: %s", path, e)
            continue
        verdict = detector.detect(content, path)
        if verdict.is_flagged:
            logger.info("🚨 Vulnerability patterns in %s", path)
        verdicts.append(verdict)

    formatter = get_formatter(config.output_format, verbose=args.verbose, use_color=not args.no_color)
    write_output(formatter.format_verdicts(verdicts), args.output)

    if any(v.is_flagged for v in verdicts):
        logger.error("❌ Vulnerability patterns found.")
        return 1

    logger.info("✅ No vulnerability patterns found.")
    return EXIT_CLEAN


def cmd_init(args: argparse.Namespace) -> int:
    """Execute the init command."""
    config_file = ".securityagent.yaml"

    if os.path.exists(config_file) and not args.force:
        print(f"Configuration file {config_file} already exists.")
        print("Use --force to overwrite.")
        return 1

    content = create_default_config()

    with open(config_file, "w", encoding="utf-8") as f:
        f.write(content)

    print(f"Created configuration file: {config_file}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(getattr(args, "verbose", False), getattr(args, "quiet", False))

    try:
        if args.command == "fix":
            return cmd_fix(args)
        elif args.command == "scan":
            return cmd_scan(args)
        elif args.command == "init":
            return cmd_init(args)
        else:
            parser.print_help()
            return 0

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except SecurityAgentError as e:
        print(f"Error: {e}", file=sys.stderr)
        if os.environ.get("DEBUG"):
            raise
        return EXIT_FATAL
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if os.environ.get("DEBUG"):
            raise
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
