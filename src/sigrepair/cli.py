"""Command line interface for the sigrepair project."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from sigrepair.analysis import (
    AnalysisResult,
    FileAnalyzer,
    compute_renamed_name,
    current_extension,
    needs_extension_recovery,
)
from sigrepair.catalog import CatalogError, FileType, SignatureCatalog, SignatureRecord
from sigrepair.config import (
    ConfigError,
    ConfigManager,
    SigrepairConfig,
    assign_nested,
    resolve_with_precedence,
)

console = Console()
error_console = Console(stderr=True)

_STATUS_STYLES = {
    "ok": "[green]ok[/green]",
    "needs recovery": "[yellow]needs recovery[/yellow]",
    "undetermined": "[red]undetermined[/red]",
}


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return

    if summary_only and mode not in {"summary", "warning", "error"}:
        return

    console.print(message)


def _format_summary_line(command: str, target: Path | str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands."""

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {target}: {parts}.[/green]"


def _configure_logging(level: str) -> None:
    """Route sigrepair log records to stderr at ``level``.

    Args:
        level: Logging level name taken from configuration.
    """

    logger = logging.getLogger("sigrepair")
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logger.setLevel(numeric)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        handler = RichHandler(console=error_console, show_path=False, rich_tracebacks=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.propagate = False


def _load_config() -> SigrepairConfig:
    """Load configuration and apply its logging settings.

    Raises:
        ConfigError: If the configuration file cannot be parsed or validated.
    """

    manager = ConfigManager()
    manager.ensure_exists()
    config = manager.load()
    _configure_logging(config.logging.level)
    return config


def _resolve_output_modes(
    ctx: click.Context,
    config: SigrepairConfig,
    *,
    quiet: bool,
    summary_mode: bool,
    json_output: bool,
) -> tuple[bool, bool]:
    """Combine CLI flags with configured defaults for quiet and summary output.

    Returns:
        tuple[bool, bool]: Effective quiet and summary-only flags.

    Raises:
        click.ClickException: If the requested modes are incompatible.
    """

    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = False
    if "summary_mode" in ctx.params:
        explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _status_for(result: AnalysisResult) -> str:
    if result.matched_record is None:
        return "undetermined"
    if result.needs_extension_recovery:
        return "needs recovery"
    return "ok"


def _result_payload(result: AnalysisResult) -> dict[str, Any]:
    record = result.matched_record
    return {
        "path": result.path.as_posix(),
        "status": _status_for(result),
        "current_extension": result.current_extension,
        "magic_numbers": result.hex_prefix_observed,
        "needs_extension_recovery": result.needs_extension_recovery,
        "signature": record.model_dump(mode="json") if record is not None else None,
    }


def _record_table(title: str, records: Sequence[SignatureRecord]) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Extension")
    table.add_column("MIME type")
    table.add_column("Type")
    table.add_column("Signature", overflow="fold")
    table.add_column("Description")
    for position, record in enumerate(records, start=1):
        table.add_row(
            str(position),
            record.extension,
            record.mime_type,
            record.file_type.value,
            record.hex_signature or "-",
            record.description,
        )
    return table


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="sigrepair")
def cli() -> None:
    """sigrepair identifies files by their magic numbers and repairs wrong extensions."""


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing each file.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def analyze(
    ctx: click.Context,
    paths: tuple[Path, ...],
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Identify the true type of each file in PATHS from its magic numbers.

    Args:
        ctx: Click context used for parameter source inspection.
        paths: Files to analyze, processed one at a time.
        json_output: If True, emit a JSON payload instead of a table.
        summary_mode: When True, limit output to the summary line.
        quiet: When True, suppress non-error CLI output entirely.
    """

    try:
        config = _load_config()
        quiet_enabled, summary_only = _resolve_output_modes(
            ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
        )
        analyzer = FileAnalyzer.from_config(config)
        analyzer.catalog.list_all()
        results = [analyzer.inspect(path.expanduser()) for path in paths]
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return
    except CatalogError as exc:
        _handle_cli_error(str(exc), code="catalog_error", json_output=json_output, original=exc)
        return
    except click.ClickException as exc:
        _handle_cli_error(exc.format_message(), code="cli_error", json_output=json_output, original=exc)
        return

    counts = {
        "files": len(results),
        "ok": sum(1 for result in results if _status_for(result) == "ok"),
        "needs_recovery": sum(1 for result in results if result.needs_extension_recovery),
        "undetermined": sum(1 for result in results if result.matched_record is None),
    }

    if json_output:
        console.print_json(
            data={
                "catalog": analyzer.catalog.source,
                "counts": counts,
                "files": [_result_payload(result) for result in results],
            }
        )
        return

    table = Table(title="File signature analysis")
    table.add_column("File", overflow="fold")
    table.add_column("Current")
    table.add_column("Detected")
    table.add_column("MIME type")
    table.add_column("Type")
    table.add_column("Magic numbers", overflow="fold")
    table.add_column("Status")
    for result in results:
        record = result.matched_record
        table.add_row(
            str(result.path),
            result.current_extension or "-",
            record.extension if record else "-",
            record.mime_type if record else "-",
            record.file_type.value if record else "-",
            result.hex_prefix_observed or "-",
            _STATUS_STYLES[_status_for(result)],
        )
    _emit_message(table, mode="detail", quiet=quiet_enabled, summary_only=summary_only)
    _emit_message(
        _format_summary_line("Analyze", analyzer.catalog.source, counts),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--extension", "-e", type=str, help="Extension to apply instead of the detected one.")
@click.option("--dry-run", is_flag=True, help="Show the new name without renaming the file.")
@click.option("--force", is_flag=True, help="Rename even when the current extension is compatible.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the rename.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def recover(
    ctx: click.Context,
    path: Path,
    extension: str | None,
    dry_run: bool,
    force: bool,
    json_output: bool,
    quiet: bool,
) -> None:
    """Repair the extension of the file at PATH.

    Args:
        ctx: Click context used for parameter source inspection.
        path: File whose extension should be repaired.
        extension: Explicit extension to apply; defaults to the detected one.
        dry_run: If True, only report the computed name.
        force: If True, rename even when no recovery is needed.
        json_output: If True, emit JSON describing the outcome.
        quiet: When True, suppress non-error CLI output entirely.
    """

    try:
        config = _load_config()
        quiet_enabled, _ = _resolve_output_modes(
            ctx, config, quiet=quiet, summary_mode=False, json_output=json_output
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return
    except click.ClickException as exc:
        _handle_cli_error(exc.format_message(), code="cli_error", json_output=json_output, original=exc)
        return

    path = path.expanduser()
    if not path.exists():
        _handle_cli_error(f"File not found: {path}", code="not_found", json_output=json_output)
        return

    analyzer = FileAnalyzer.from_config(config)
    record: SignatureRecord | None = None
    if extension is None:
        try:
            analyzer.catalog.list_all()
        except CatalogError as exc:
            _handle_cli_error(str(exc), code="catalog_error", json_output=json_output, original=exc)
            return
        record = analyzer.analyze(path)
        if record is None:
            _handle_cli_error(
                f"Could not determine the type of {path}; pass --extension to rename it anyway.",
                code="undetermined",
                json_output=json_output,
            )
            return
        extension = record.extension

    target_extension = extension.strip().lstrip(".")
    if not target_extension:
        _handle_cli_error("--extension must not be empty.", code="invalid_input", json_output=json_output)
        return

    existing = current_extension(path)
    target = path.with_name(
        compute_renamed_name(path.name, target_extension, config.recovery.max_extension_length)
    )
    payload: dict[str, Any] = {
        "source": path.as_posix(),
        "destination": target.as_posix(),
        "extension": target_extension.lower(),
        "detected": record.model_dump(mode="json") if record is not None else None,
        "dry_run": dry_run,
        "renamed": False,
    }

    required = needs_extension_recovery(target_extension, existing)
    if config.recovery.require_mismatch and not required and not force:
        payload["reason"] = "compatible_extension"
        if json_output:
            console.print_json(data=payload)
            return
        _emit_message(
            f"[green]{path.name} already carries a compatible extension "
            f"('{existing}'); no recovery needed.[/green]",
            mode="summary",
            quiet=quiet_enabled,
            summary_only=False,
        )
        return

    if dry_run:
        if json_output:
            console.print_json(data=payload)
            return
        _emit_message(
            f"[cyan]Would rename {path.name} -> {target.name}[/cyan]",
            mode="summary",
            quiet=quiet_enabled,
            summary_only=False,
        )
        return

    if not analyzer.recover(path, target_extension):
        _handle_cli_error(
            f"Failed to restore the extension of {path}.",
            code="rename_failed",
            json_output=json_output,
            details={"destination": target.as_posix()},
        )
        return

    payload["renamed"] = True
    if json_output:
        console.print_json(data=payload)
        return
    _emit_message(
        f"[green]Extension restored: {path.name} -> {target.name}[/green]",
        mode="summary",
        quiet=quiet_enabled,
        summary_only=False,
    )


@cli.group()
def catalog() -> None:
    """Inspect the signature catalog."""


def _open_catalog() -> SignatureCatalog:
    try:
        config = _load_config()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    return SignatureCatalog.from_path(config.catalog.path)


def _list_records(signatures: SignatureCatalog) -> tuple[SignatureRecord, ...]:
    try:
        return signatures.list_all()
    except CatalogError as exc:
        raise click.ClickException(str(exc)) from exc


@catalog.command("list")
@click.option(
    "--type",
    "file_type",
    type=click.Choice([member.value for member in FileType]),
    help="Only list signatures of this file type.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit the catalog as JSON.")
def catalog_list(file_type: str | None, json_output: bool) -> None:
    """List known signatures in matching order.

    Args:
        file_type: Optional file type filter.
        json_output: If True, emit JSON instead of a table.
    """
    signatures = _open_catalog()
    records = [
        record
        for record in _list_records(signatures)
        if file_type is None or record.file_type.value == file_type
    ]
    if json_output:
        console.print_json(
            data={
                "catalog": signatures.source,
                "signatures": [record.model_dump(mode="json") for record in records],
            }
        )
        return
    console.print(_record_table(f"Signatures from {signatures.source}", records))


@catalog.command("show")
@click.argument("extension")
def catalog_show(extension: str) -> None:
    """Show the signature registered for EXTENSION.

    Args:
        extension: Extension to look up, with or without the leading dot.
    """
    signatures = _open_catalog()
    # Lookups log and swallow store errors; load first so they surface here.
    _list_records(signatures)
    record = signatures.find_by_extension(extension)
    if record is None:
        raise click.ClickException(f"No signature registered for extension '{extension}'.")
    console.print(_record_table(f"Signature for .{record.extension}", [record]))


@catalog.command("lookup")
@click.argument("hex_signature")
def catalog_lookup(hex_signature: str) -> None:
    """Show the signature whose magic number is exactly HEX_SIGNATURE.

    Args:
        hex_signature: Hex pattern to look up.
    """
    signatures = _open_catalog()
    _list_records(signatures)
    record = signatures.find_by_hex_signature(hex_signature)
    if record is None:
        raise click.ClickException(f"No signature registered for magic number '{hex_signature}'.")
    console.print(_record_table(f"Signature for {record.hex_signature}", [record]))


@cli.group()
def config() -> None:
    """Manage sigrepair configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Args:
        no_env: If True, ignore environment-derived overrides.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        effective = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


def _known_settings() -> list[str]:
    """Return every dotted setting name, e.g. ``probe.match_bytes``."""
    return [
        f"{section}.{name}"
        for section, values in SigrepairConfig().model_dump(mode="python").items()
        for name in values
    ]


def _changed_settings(
    before: SigrepairConfig, after: SigrepairConfig
) -> list[tuple[str, Any, Any]]:
    old = before.model_dump(mode="json")
    new = after.model_dump(mode="json")
    return [
        (f"{section}.{name}", old[section][name], value)
        for section, values in new.items()
        for name, value in values.items()
        if old[section][name] != value
    ]


def _store_overrides(manager: ConfigManager, file_data: dict[str, Any]) -> list[tuple[str, Any, Any]]:
    """Validate ``file_data``, write it, and return the settings it changed.

    Raises:
        click.ClickException: If the data does not form a valid configuration.
    """
    try:
        before = resolve_with_precedence(
            defaults=SigrepairConfig(), file_overrides=manager.load_file_overrides()
        )
    except ConfigError:
        # A broken file on disk is being replaced; compare against defaults.
        before = SigrepairConfig()
    try:
        after = resolve_with_precedence(defaults=SigrepairConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    return _changed_settings(before, after)


def _changes_table(changes: Sequence[tuple[str, Any, Any]]) -> Table:
    table = Table(title=f"Configuration changes ({len(changes)})")
    table.add_column("Setting")
    table.add_column("Before")
    table.add_column("After")
    for setting, old, new in changes:
        table.add_row(setting, repr(old), repr(new))
    return table


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML literal to store under KEY.")
def config_set(key: str, value: str) -> None:
    """Store VALUE for the dotted setting KEY, e.g. `probe.match_bytes`.

    Args:
        key: Dotted setting name.
        value: YAML literal parsed before validation.

    Raises:
        click.ClickException: If KEY is unknown or VALUE fails validation.
    """
    setting = ".".join(segment.strip() for segment in key.split(".") if segment.strip())
    known = _known_settings()
    if setting not in known:
        raise click.ClickException(
            f"Unknown setting '{key}'. Known settings: {', '.join(known)}."
        )

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    manager = ConfigManager()
    manager.ensure_exists()
    try:
        file_data = manager.load_file_overrides()
        assign_nested(file_data, setting.split("."), parsed_value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    changes = _store_overrides(manager, file_data)
    if not changes:
        console.print(f"[yellow]No changes applied; {setting} is already {parsed_value!r}.[/yellow]")
        return
    console.print(_changes_table(changes))


@config.command("edit")
def config_edit() -> None:
    """Edit the configuration file in $EDITOR and apply it if it validates.

    Raises:
        click.ClickException: If the edited YAML is invalid; the file on disk is left untouched.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")
    if edited is None or edited == original:
        console.print("[yellow]Configuration left unchanged.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc
    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    changes = _store_overrides(manager, parsed)
    if changes:
        console.print(_changes_table(changes))
    console.print(f"[green]Configuration updated; {len(changes)} setting(s) changed.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
