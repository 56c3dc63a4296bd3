"""Command-line interface router for adf-engine."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from adf_engine.config import ConfigLoadError, ConfigValidationError, load_config
from adf_engine.document import Document
from adf_engine.errors import AdfError, ParseError
from adf_engine.main import ExitCode
from adf_engine.migration import (
    MergeStrategy,
    MigrationPlan,
    apply_migration,
    build_migration_plan,
    parse_markdown_sections,
)
from adf_engine.observability import LoggingConfig, get_logger, setup_logging, shutdown_logging
from adf_engine.patching import apply_patches, load_operations
from adf_engine.routing import (
    BundleResult,
    Manifest,
    bundle_modules,
    load_manifest,
    resolve_modules,
)
from adf_engine.syntax import format_document, parse
from adf_engine.ui.keywords import tokenize_task
from adf_engine.ui.render import CLIRenderer, create_renderer
from adf_engine.verification import (
    ConstraintStatus,
    EvidenceResult,
    StaleBaseline,
    detect_stale_baselines,
    validate_constraints,
)

STDIN_MARKER: Final[str] = "-"
DEDUPE_MODULE: Final[str] = "core.adf"

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = ExitCode.CHECK_FAILED

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class Measurement:
    metric: str
    path: str
    lines: int | None
    error: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {"metric": self.metric, "path": self.path, "lines": self.lines, "error": self.error}


@dataclass(frozen=True, slots=True)
class Assembly:
    """Resolved task context shared by ``bundle`` and ``evidence``."""

    ai_dir: Path
    manifest: Manifest
    task: str | None
    keywords: tuple[str, ...]
    missing_modules: tuple[str, ...]
    bundle: BundleResult


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="adf",
        description=(
            "adf-engine: format, patch, bundle and validate ADF documents.\n\n"
            "Common workflows:\n"
            "  adf fmt .ai/core.adf --check     Fail when a file is not canonical\n"
            "  adf patch core.adf --ops ops.yaml Apply typed edit operations\n"
            "  adf bundle --task 'fix react'     Assemble context for a task\n"
            "  adf evidence --auto-measure --ci  Gate CI on metric ceilings\n"
            "  adf migrate CLAUDE.md --dry-run   Preview a markdown migration\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to adf TOML config (default: ./adf.toml if present).",
    )
    common.add_argument(
        "--format",
        dest="output_format",
        choices=("text", "json"),
        default=None,
        help="Output format (default: output.format from config, else text).",
    )
    common.add_argument(
        "--log-level",
        type=str.upper,
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default=None,
        help="Log level for stderr diagnostics.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # fmt -----------------------------------------------------------------
    fmt_parser = subparsers.add_parser(
        "fmt",
        parents=[common],
        help="Print, rewrite, or check canonical formatting",
        description=(
            "Format ADF files canonically.\n\n"
            "Examples:\n"
            "  adf fmt .ai/core.adf\n"
            "  adf fmt .ai/*.adf --check\n"
            "  adf fmt .ai/core.adf --write\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    fmt_parser.add_argument("files", nargs="+", help="ADF files to format")
    fmt_mode = fmt_parser.add_mutually_exclusive_group()
    fmt_mode.add_argument(
        "--check", action="store_true", help="Exit 1 when any file is not canonical"
    )
    fmt_mode.add_argument("--write", action="store_true", help="Rewrite files in place")
    fmt_parser.set_defaults(handler=_cmd_fmt)

    # patch ---------------------------------------------------------------
    patch_parser = subparsers.add_parser(
        "patch",
        parents=[common],
        help="Apply typed patch operations to one ADF file",
        description=(
            "Apply a YAML or JSON list of operations to an ADF file.\n\n"
            "Examples:\n"
            "  adf patch .ai/core.adf --ops ops.yaml\n"
            "  adf patch .ai/core.adf --ops - --write < ops.json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    patch_parser.add_argument("file", help="ADF file to patch")
    patch_parser.add_argument(
        "--ops", required=True, help="Operations file (YAML or JSON), or '-' for stdin"
    )
    patch_parser.add_argument("--write", action="store_true", help="Rewrite the file in place")
    patch_parser.set_defaults(handler=_cmd_patch)

    # bundle --------------------------------------------------------------
    bundle_parser = subparsers.add_parser(
        "bundle",
        parents=[common],
        help="Resolve and merge the modules a task needs",
        description=(
            "Tokenize a task, resolve manifest modules, and print the merged context.\n\n"
            "Examples:\n"
            "  adf bundle --task 'Fix the React login form'\n"
            "  adf bundle --task 'db migration' --ai-dir docs/.ai --format json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    bundle_parser.add_argument("--task", required=True, help="Free-text task description")
    bundle_parser.add_argument("--ai-dir", default=None, help="Directory holding manifest.adf")
    bundle_parser.set_defaults(handler=_cmd_bundle)

    # evidence ------------------------------------------------------------
    evidence_parser = subparsers.add_parser(
        "evidence",
        parents=[common],
        help="Validate metric constraints for CI gating",
        description=(
            "Bundle the task context and judge every metric against its ceiling.\n\n"
            "Examples:\n"
            "  adf evidence\n"
            "  adf evidence --auto-measure --ci\n"
            "  adf evidence --context '{\"entry_loc\": 180}' --format json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    evidence_parser.add_argument("--task", default=None, help="Optional task description")
    evidence_parser.add_argument("--ai-dir", default=None, help="Directory holding manifest.adf")
    context_source = evidence_parser.add_mutually_exclusive_group()
    context_source.add_argument("--context", default=None, help="JSON object of metric values")
    context_source.add_argument(
        "--context-file", default=None, help="Path to a JSON object of metric values"
    )
    evidence_parser.add_argument(
        "--auto-measure",
        action="store_true",
        default=None,
        help="Count lines of the files listed in the manifest METRICS section",
    )
    evidence_parser.add_argument(
        "--stale-threshold",
        type=float,
        default=None,
        help="Ratio of measured to recorded value that marks a baseline stale",
    )
    evidence_parser.add_argument(
        "--ci", action="store_true", help="Exit 1 when any constraint fails"
    )
    evidence_parser.set_defaults(handler=_cmd_evidence)

    # migrate -------------------------------------------------------------
    migrate_parser = subparsers.add_parser(
        "migrate",
        parents=[common],
        help="Route markdown agent-config rules into ADF modules",
        description=(
            "Classify markdown agent-config files and merge their rules into the\n"
            "ADF modules under the ai directory. Source files are never modified.\n\n"
            "Examples:\n"
            "  adf migrate CLAUDE.md --dry-run\n"
            "  adf migrate CLAUDE.md .cursorrules --merge-strategy append\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    migrate_parser.add_argument("sources", nargs="+", help="Markdown files to migrate")
    migrate_parser.add_argument("--ai-dir", default=None, help="Directory receiving ADF modules")
    migrate_parser.add_argument(
        "--merge-strategy",
        choices=[strategy.value for strategy in MergeStrategy],
        default=MergeStrategy.DEDUPE.value,
        help="How items join an existing section (default: dedupe)",
    )
    migrate_parser.add_argument(
        "--dry-run", action="store_true", help="Print the plan without writing modules"
    )
    migrate_parser.set_defaults(handler=_cmd_migrate)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return int(ExitCode.CONFIG_ERROR)

    try:
        namespace.config = _load_effective_config(namespace)
        observability = namespace.config["observability"]
        setup_logging(
            LoggingConfig(level=observability["log_level"], log_format=observability["log_format"])
        )
        try:
            result = handler(namespace)
        finally:
            shutdown_logging()
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return int(exc.exit_code)
    except AdfError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return int(ExitCode.DOCUMENT_ERROR)
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_fmt(args: argparse.Namespace) -> int:
    check = _flag(args, "check")
    write = _flag(args, "write")
    mode = "check" if check else "write" if write else "print"
    paths = [Path(raw) for raw in _string_sequence(getattr(args, "files", None))]

    reports: list[dict[str, object]] = []
    for path in paths:
        text = _read_text(path)
        formatted = format_document(_parse_file(path, text))
        canonical = text == formatted
        written = False
        if write and not canonical:
            _write_text(path, formatted)
            written = True
        report: dict[str, object] = {
            "path": path.as_posix(),
            "canonical": canonical,
            "written": written,
        }
        if mode == "print":
            report["text"] = formatted
        reports.append(report)

    all_canonical = all(bool(report["canonical"]) for report in reports)
    exit_code = ExitCode.CHECK_FAILED if check and not all_canonical else ExitCode.SUCCESS

    if _wants_json(args):
        _emit_json(
            {"command": "fmt", "mode": mode, "files": reports, "all_canonical": all_canonical}
        )
        return int(exit_code)

    renderer = _get_renderer()
    for report in reports:
        path_text = str(report["path"])
        if mode == "check":
            if report["canonical"]:
                renderer.ok(path_text)
            else:
                renderer.fail(f"{path_text} (not canonical)")
        elif mode == "write":
            renderer.text(f"{'formatted' if report['written'] else 'unchanged'} {path_text}")
        else:
            sys.stdout.write(str(report["text"]))
    return int(exit_code)


def _cmd_patch(args: argparse.Namespace) -> int:
    path = Path(_require_str(getattr(args, "file", None), "file"))
    ops_arg = _require_str(getattr(args, "ops", None), "ops")

    doc = _parse_file(path, _read_text(path))
    ops_text = sys.stdin.read() if ops_arg == STDIN_MARKER else _read_text(Path(ops_arg))
    operations = load_operations(ops_text)
    patched = apply_patches(doc, operations)
    formatted = format_document(patched)

    write = _flag(args, "write")
    if write:
        _write_text(path, formatted)
    logger.info(
        "adf_patch_complete", path=path.as_posix(), operations=len(operations), written=write
    )

    if _wants_json(args):
        _emit_json(
            {
                "command": "patch",
                "path": path.as_posix(),
                "operations": [op.to_dict() for op in operations],
                "written": write,
                "text": formatted,
            }
        )
        return int(ExitCode.SUCCESS)

    if write:
        _get_renderer().text(f"patched {path.as_posix()} ({len(operations)} operations)")
    else:
        sys.stdout.write(formatted)
    return int(ExitCode.SUCCESS)


def _cmd_bundle(args: argparse.Namespace) -> int:
    task = _require_str(getattr(args, "task", None), "task")
    assembly = _assemble(args, task)
    formatted = format_document(assembly.bundle.document)

    if _wants_json(args):
        _emit_json(
            {
                "command": "bundle",
                "ai_dir": assembly.ai_dir.as_posix(),
                "task": assembly.task,
                "keywords": list(assembly.keywords),
                "missing_modules": list(assembly.missing_modules),
                "bundle": assembly.bundle.to_dict(),
                "text": formatted,
            }
        )
        return int(ExitCode.SUCCESS)

    renderer = _get_renderer()
    renderer.heading("ADF Bundle")
    renderer.kv("Task", task)
    renderer.kv("Keywords", ", ".join(assembly.keywords) or "(none)")
    _render_bundle_summary(renderer, assembly)

    bundle = assembly.bundle
    budgets = {module.path: module.token_budget for module in assembly.manifest.on_demand}
    rows = [
        [path, str(tokens), _optional_text(budgets.get(path))]
        for path, tokens in bundle.per_module_tokens
    ]
    renderer.table(("Module", "Tokens", "Budget"), rows, title="Per-module tokens:")
    for overrun in bundle.module_budget_overruns:
        renderer.warning(
            f"{overrun.module} uses ~{overrun.tokens} tokens (budget {overrun.budget})"
        )

    matched = [item for item in bundle.trigger_matches if item.matched]
    if matched:
        renderer.section("Trigger matches:")
        renderer.items(
            [
                f"{item.module} ({item.load_reason}: {', '.join(item.matched_keywords) or '-'})"
                for item in matched
            ]
        )
    if bundle.unmatched_modules:
        renderer.section("Not loaded:")
        renderer.items(list(bundle.unmatched_modules))
    if bundle.advisory_only_modules:
        renderer.section("Advisory-only modules:")
        renderer.items(list(bundle.advisory_only_modules))

    renderer.section("Bundled document:")
    renderer.text(formatted.rstrip("\n"))
    return int(ExitCode.SUCCESS)


def _cmd_evidence(args: argparse.Namespace) -> int:
    config = _config(args)
    task = _optional_str(getattr(args, "task", None))
    explicit = _explicit_context(args)
    assembly = _assemble(args, task)

    measurements: tuple[Measurement, ...] = ()
    if config["evidence"]["auto_measure"]:
        measurements = measure_metric_sources(assembly.manifest)
    measured = {item.metric: item.lines for item in measurements if item.lines is not None}
    context: dict[str, object] = {**measured, **explicit}

    document = assembly.bundle.document
    evidence = validate_constraints(document, context)
    stale = detect_stale_baselines(document, context, config["evidence"]["stale_threshold"])
    ci = _flag(args, "ci")
    exit_code = ExitCode.CHECK_FAILED if ci and not evidence.all_passing else ExitCode.SUCCESS
    logger.debug(
        "adf_evidence_complete",
        constraints=len(evidence.constraints),
        fail_count=evidence.fail_count,
        stale_count=len(stale),
    )

    if _wants_json(args):
        payload: dict[str, object] = {
            "command": "evidence",
            "ai_dir": assembly.ai_dir.as_posix(),
            "task": assembly.task,
            "keywords": list(assembly.keywords),
            "modules": list(assembly.bundle.modules),
            "missing_modules": list(assembly.missing_modules),
            "token_estimate": assembly.bundle.token_estimate,
            "token_budget": assembly.bundle.token_budget,
            "token_utilization": assembly.bundle.token_utilization,
            "advisory_only_modules": list(assembly.bundle.advisory_only_modules),
            "auto_measured": [item.to_dict() for item in measurements],
            "stale_baselines": [item.to_dict() for item in stale],
            **evidence.to_dict(),
        }
        _emit_json(payload)
        return int(exit_code)

    renderer = _get_renderer()
    renderer.heading("ADF Evidence Report")
    _render_bundle_summary(renderer, assembly)
    if measurements:
        renderer.section("Auto-measured:")
        renderer.items(
            [
                f"{item.metric}: {item.lines} lines ({item.path})"
                if item.lines is not None
                else f"{item.metric}: [{item.error}] ({item.path})"
                for item in measurements
            ]
        )
    _render_evidence(renderer, evidence, stale)
    return int(exit_code)


def _cmd_migrate(args: argparse.Namespace) -> int:
    config = _config(args)
    ai_dir = Path(config["paths"]["ai_dir"])
    strategy = MergeStrategy(_require_str(getattr(args, "merge_strategy", None), "merge strategy"))
    dry_run = _flag(args, "dry_run")
    sources = [Path(raw) for raw in _string_sequence(getattr(args, "sources", None))]

    sections = [
        section for source in sources for section in parse_markdown_sections(_read_text(source))
    ]
    existing = None
    if strategy is MergeStrategy.DEDUPE and (ai_dir / DEDUPE_MODULE).is_file():
        existing = _parse_file(ai_dir / DEDUPE_MODULE, _read_text(ai_dir / DEDUPE_MODULE))
    plan = build_migration_plan(sections, existing)

    modules: list[dict[str, object]] = []
    for module in plan.target_modules:
        path = ai_dir / module
        created = not path.is_file()
        doc = Document() if created else _parse_file(path, _read_text(path))
        formatted = format_document(apply_migration(doc, plan.items_for(module), strategy))
        if not dry_run:
            _ensure_dir(ai_dir)
            _write_text(path, formatted)
        modules.append(
            {
                "path": path.as_posix(),
                "created": created,
                "written": not dry_run,
                "items": len(plan.items_for(module)),
                "text": formatted,
            }
        )
    logger.info(
        "adf_migrate_complete",
        sources=len(sources),
        modules=len(modules),
        strategy=strategy.value,
        dry_run=dry_run,
    )

    if _wants_json(args):
        _emit_json(
            {
                "command": "migrate",
                "ai_dir": ai_dir.as_posix(),
                "sources": [source.as_posix() for source in sources],
                "strategy": strategy.value,
                "dry_run": dry_run,
                "plan": plan.to_dict(),
                "modules": modules,
            }
        )
        return int(ExitCode.SUCCESS)

    renderer = _get_renderer()
    renderer.heading("ADF Migration")
    renderer.kv("Sources", ", ".join(source.as_posix() for source in sources))
    renderer.kv("Strategy", strategy.value)
    _render_migration_plan(renderer, plan)
    if not modules:
        renderer.text("nothing to migrate")
    for report in modules:
        verb = "would write" if dry_run else "created" if report["created"] else "updated"
        renderer.text(f"{verb} {report['path']} ({report['items']} items)")
    return int(ExitCode.SUCCESS)


# ---------------------------------------------------------------------------
# Assembly and measurement
# ---------------------------------------------------------------------------


def _assemble(args: argparse.Namespace, task: str | None) -> Assembly:
    config = _config(args)
    ai_dir = Path(config["paths"]["ai_dir"])
    base_path = ai_dir.as_posix()

    manifest = load_manifest(base_path, _read_module_text, filename=config["paths"]["manifest"])
    keywords = tokenize_task(task) if task else ()
    resolved = resolve_modules(manifest, keywords)

    default_paths = set(manifest.default_load)
    missing = tuple(
        path for path in resolved if path not in default_paths and not (ai_dir / path).is_file()
    )
    for path in missing:
        logger.warning("adf_bundle_module_missing", module_path=path)
    loadable = [path for path in resolved if path not in missing]

    bundle = bundle_modules(base_path, loadable, _read_module_text, keywords, manifest=manifest)
    return Assembly(
        ai_dir=ai_dir,
        manifest=manifest,
        task=task,
        keywords=keywords,
        missing_modules=missing,
        bundle=bundle,
    )


def measure_metric_sources(manifest: Manifest) -> tuple[Measurement, ...]:
    """Count lines of each file named in the manifest ``METRICS`` map, relative to cwd."""

    measurements: list[Measurement] = []
    for source in manifest.metrics:
        metric = source.key.lower()
        path = Path(source.path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError:
            measurements.append(
                Measurement(metric=metric, path=source.path, lines=None, error="file not found")
            )
            continue
        measurements.append(
            Measurement(metric=metric, path=source.path, lines=len(content.split("\n")))
        )
    return tuple(measurements)


def _explicit_context(args: argparse.Namespace) -> dict[str, object]:
    raw = _optional_str(getattr(args, "context", None))
    flag = "--context"
    context_file = _optional_str(getattr(args, "context_file", None))
    if context_file is not None:
        raw = _read_text(Path(context_file))
        flag = "--context-file"
    if raw is None:
        return {}

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CLIError(f"invalid {flag} JSON: {exc}", exit_code=ExitCode.CONFIG_ERROR) from exc
    if not isinstance(parsed, dict):
        raise CLIError(
            f"invalid {flag} JSON: must be an object", exit_code=ExitCode.CONFIG_ERROR
        )
    return {str(key): value for key, value in parsed.items()}


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer() -> CLIRenderer:
    return create_renderer()


def _render_bundle_summary(renderer: CLIRenderer, assembly: Assembly) -> None:
    bundle = assembly.bundle
    renderer.kv("Modules loaded", ", ".join(bundle.modules) or "(none)")
    renderer.kv("Token estimate", f"~{bundle.token_estimate}")
    if bundle.token_budget is not None and bundle.token_utilization is not None:
        renderer.kv(
            "Token budget", f"{bundle.token_budget} ({bundle.token_utilization * 100:.0f}%)"
        )
    for path in assembly.missing_modules:
        renderer.warning(f"module not found, skipped: {path}")


def _render_evidence(
    renderer: CLIRenderer, evidence: EvidenceResult, stale: Sequence[StaleBaseline]
) -> None:
    renderer.section("Constraints:")
    if not evidence.constraints:
        renderer.text("  (no metric constraints)")
    for item in evidence.constraints:
        label = f"{item.message} ({item.section}, {item.source})"
        if item.status is ConstraintStatus.PASS:
            renderer.ok(label)
        elif item.status is ConstraintStatus.WARN:
            renderer.warn(label)
        else:
            renderer.fail(label)

    summary = evidence.weight_summary
    renderer.section("Sections by weight:")
    renderer.kv("load-bearing", summary.load_bearing)
    renderer.kv("advisory", summary.advisory)
    renderer.kv("unweighted", summary.unweighted)
    renderer.kv("total", summary.total)

    if stale:
        renderer.section("Stale baselines:")
        renderer.items(
            [
                f"{item.metric}: baseline {item.baseline}, current {item.current} "
                f"(x{item.ratio}); recommended ceiling {item.recommended_ceiling}"
                for item in stale
            ]
        )

    renderer.section(
        f"{evidence.pass_count} passed, {evidence.warn_count} at ceiling, "
        f"{evidence.fail_count} failed"
    )


def _render_migration_plan(renderer: CLIRenderer, plan: MigrationPlan) -> None:
    summary = plan.summary
    renderer.section("Plan:")
    renderer.kv("CONSTRAINTS", summary.constraints)
    renderer.kv("CONTEXT", summary.context)
    renderer.kv("ADVISORY", summary.advisory)
    renderer.kv("STAY", summary.stay)
    if plan.stay_items:
        renderer.section("Staying in source:")
        renderer.items(
            [f"{item.element.content} ({item.classification.reason})" for item in plan.stay_items]
        )


# ---------------------------------------------------------------------------
# Helpers: config, files
# ---------------------------------------------------------------------------


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    config_path = _optional_str(getattr(args, "config_path", None))
    ai_dir = _optional_str(getattr(args, "ai_dir", None))
    overrides: dict[str, object | None] = {
        "observability.log_level": getattr(args, "log_level", None),
        "output.format": getattr(args, "output_format", None),
        "paths.ai_dir": None if ai_dir is None else Path(ai_dir).expanduser().resolve().as_posix(),
        "evidence.auto_measure": getattr(args, "auto_measure", None),
        "evidence.stale_threshold": getattr(args, "stale_threshold", None),
    }

    try:
        return load_config(config_path, cli_overrides=overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=ExitCode.CONFIG_ERROR) from exc


def _config(args: argparse.Namespace) -> dict[str, Any]:
    config = getattr(args, "config", None)
    if not isinstance(config, dict):
        config = _load_effective_config(args)
        args.config = config
    return config


def _wants_json(args: argparse.Namespace) -> bool:
    return bool(_config(args)["output"]["format"] == "json")


def _parse_file(path: Path, text: str) -> Document:
    try:
        return parse(text)
    except ParseError as exc:
        raise CLIError(f"{path.as_posix()}: {exc}", exit_code=ExitCode.DOCUMENT_ERROR) from exc


def _read_text(path: Path) -> str:
    try:
        with path.open(encoding="utf-8", newline="") as handle:
            return handle.read()
    except OSError as exc:
        raise CLIError(
            f"unable to read {path.as_posix()}: {exc.strerror or exc}",
            exit_code=ExitCode.CONFIG_ERROR,
        ) from exc


def _read_module_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def _write_text(path: Path, text: str) -> None:
    try:
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)
    except OSError as exc:
        raise CLIError(
            f"unable to write {path.as_posix()}: {exc.strerror or exc}",
            exit_code=ExitCode.CONFIG_ERROR,
        ) from exc


def _ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CLIError(
            f"unable to create {path.as_posix()}: {exc.strerror or exc}",
            exit_code=ExitCode.CONFIG_ERROR,
        ) from exc


# ---------------------------------------------------------------------------
# Helpers: argument parsing
# ---------------------------------------------------------------------------


def _require_str(value: object, name: str) -> str:
    if not isinstance(value, str):
        raise CLIError(f"invalid {name}: expected string", exit_code=ExitCode.CONFIG_ERROR)
    cleaned = value.strip()
    if not cleaned:
        raise CLIError(f"invalid {name}: value cannot be empty", exit_code=ExitCode.CONFIG_ERROR)
    return cleaned


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise CLIError("invalid optional string argument", exit_code=ExitCode.CONFIG_ERROR)
    cleaned = value.strip()
    return cleaned or None


def _optional_text(value: object) -> str:
    return "-" if value is None else str(value)


def _flag(args: argparse.Namespace, name: str) -> bool:
    value = getattr(args, name, False)
    return bool(value)


def _string_sequence(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        cleaned = value.strip()
        return () if not cleaned else (cleaned,)
    if not isinstance(value, Sequence):
        raise CLIError("invalid sequence argument", exit_code=ExitCode.CONFIG_ERROR)

    parsed: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise CLIError("invalid sequence argument", exit_code=ExitCode.CONFIG_ERROR)
        cleaned = item.strip()
        if cleaned:
            parsed.append(cleaned)
    return tuple(parsed)


__all__ = [
    "CLIError",
    "Measurement",
    "build_parser",
    "measure_metric_sources",
    "run_cli",
]
