"""CLI entrypoints for wireup commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .catalog import CATALOG, Capability
from .config import RunContext
from .errors import AcquisitionError, ConfigError, UnknownCapabilityError, WireupError
from .git.workflow import WorkflowState
from .logging import configure_logging
from .orchestrator import Orchestrator, RunOptions


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_context_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to .wireup.yml or the directory containing it.",
    )
    parser.add_argument(
        "--secrets",
        type=Path,
        default=None,
        help="Path to the secrets file (defaults to config.secret.json).",
    )


def _add_framework_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--framework",
        default=None,
        help="Override framework detection (e.g. react, nextjs, express, auto).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wireup",
        description="Generate third-party service integrations for a repository and commit them.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    integrate_parser = subparsers.add_parser(
        "integrate",
        help="Clone a repository, generate integrations and commit them on a branch.",
    )
    _add_verbose_option(integrate_parser, suppress_default=True)
    _add_context_options(integrate_parser)
    _add_framework_option(integrate_parser)
    integrate_parser.add_argument("repo_url", help="Git URL of the repository to integrate into.")
    integrate_parser.add_argument(
        "capabilities",
        nargs="+",
        help="Capability identifiers to integrate (see `wireup capabilities`).",
    )
    integrate_parser.add_argument(
        "--auto",
        action="store_true",
        help="Approve the changes without prompting.",
    )
    integrate_parser.add_argument(
        "--no-push",
        action="store_true",
        help="Commit locally without pushing the branch.",
    )
    integrate_parser.add_argument(
        "--keep-clone",
        action="store_true",
        default=None,
        help="Keep the cloned working copy after the run.",
    )
    integrate_parser.add_argument(
        "--branch",
        default=None,
        help="Branch to commit on (defaults to integration-<timestamp>).",
    )
    integrate_parser.add_argument(
        "--force-push",
        action="store_true",
        help="Push with --force-with-lease.",
    )

    plan_parser = subparsers.add_parser(
        "plan",
        help="Generate integration files for a local checkout without committing.",
    )
    _add_verbose_option(plan_parser, suppress_default=True)
    _add_context_options(plan_parser)
    _add_framework_option(plan_parser)
    plan_parser.add_argument("path", help="Path to the local repository.")
    plan_parser.add_argument("capabilities", nargs="+", help="Capability identifiers.")
    plan_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Directory to write the plan into (defaults to the repository).",
    )

    capabilities_parser = subparsers.add_parser(
        "capabilities",
        help="List the supported capabilities.",
    )
    _add_verbose_option(capabilities_parser, suppress_default=True)

    secrets_parser = subparsers.add_parser(
        "secrets",
        help="Inspect the service secrets file.",
    )
    _add_verbose_option(secrets_parser, suppress_default=True)
    _add_context_options(secrets_parser)
    secrets_parser.add_argument("action", choices=["validate", "list", "export"])
    secrets_parser.add_argument(
        "--api",
        default=None,
        help="Restrict export to a single service.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for wireup commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(getattr(args, "verbose", False)))

    if args.command == "capabilities":
        _print_capabilities()
        return

    try:
        context = RunContext.load(args.config, args.secrets)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "integrate":
        _run_integrate(parser, args, context)
    elif args.command == "plan":
        _run_plan(parser, args, context)
    elif args.command == "secrets":
        _run_secrets(args, context)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_integrate(
    parser: argparse.ArgumentParser, args: argparse.Namespace, context: RunContext
) -> None:
    orchestrator = Orchestrator(context)
    options = RunOptions(
        repo_url=args.repo_url,
        capabilities=args.capabilities,
        auto_approve=bool(args.auto),
        publish=not args.no_push,
        keep=args.keep_clone,
        branch=args.branch,
        framework=args.framework,
        force_push=bool(args.force_push),
    )
    try:
        outcome = orchestrator.run(options)
    except UnknownCapabilityError as exc:
        parser.exit(1, f"{exc}\nRun `wireup capabilities` to list them.\n")
    except AcquisitionError as exc:
        parser.exit(1, f"{exc}\nCheck the URL and your access with: git ls-remote {args.repo_url}\n")
    except WireupError as exc:
        parser.exit(1, f"wireup integrate failed: {exc}\nRun with --verbose for more details.\n")

    if outcome.state is WorkflowState.CANCELLED:
        parser.exit(1, "Integration cancelled; nothing was committed.\n")
    if not outcome.success:
        parser.exit(1, f"wireup integrate failed: {outcome.error or 'commit failed'}\n")


def _run_plan(
    parser: argparse.ArgumentParser, args: argparse.Namespace, context: RunContext
) -> None:
    orchestrator = Orchestrator(context)
    try:
        outcome = orchestrator.plan_local(
            args.path,
            args.capabilities,
            output_dir=args.output,
            framework=args.framework,
        )
    except UnknownCapabilityError as exc:
        parser.exit(1, f"{exc}\nRun `wireup capabilities` to list them.\n")
    except WireupError as exc:
        parser.exit(1, f"wireup plan failed: {exc}\nRun with --verbose for more details.\n")
    except OSError as exc:
        parser.exit(1, f"wireup plan failed: {exc}\n")

    print(f"Integration plan written to {_relativize(outcome.output_dir)}")
    for path in outcome.written:
        print(f"  {path}")
    for note in outcome.plan.notes:
        print(f"- {note}")


def _run_secrets(args: argparse.Namespace, context: RunContext) -> None:
    secrets = context.secrets
    if args.action == "list":
        enabled = set(secrets.enabled())
        for name in secrets.names():
            status = "enabled" if name in enabled else "disabled"
            print(f"{name}: {status}")
        return

    if args.action == "export":
        print(secrets.export_env(args.api))
        return

    report = secrets.validate()
    print(f"Ready: {', '.join(report.ready) or 'none'}")
    print(f"Disabled: {', '.join(report.disabled) or 'none'}")
    if report.placeholders:
        print(f"Placeholder values: {', '.join(report.placeholders)}")
    if report.missing:
        print(f"Missing values: {', '.join(report.missing)}")


def _print_capabilities() -> None:
    for capability in Capability:
        config = CATALOG[capability]
        print(f"{capability.value:<12} {config.name} - {config.description}")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
