#!/usr/bin/env python3
"""
dynpkg Command Line Interface
"""
import argparse
import json
import logging
import subprocess
import sys

from .config import CONFIG, PipelineConfig, load_config_from_file
from .errors import AssetFetchError, DynPkgError, ManifestMissingError, StoreCorruptError
from .pipeline import BuildPipeline

RULE = "═" * 55

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CORRUPT = 2


def _build_pipeline(args) -> BuildPipeline:
    overrides = {
        "workspace": args.workspace,
        "manifest_path": args.manifest,
        "continue_on_error": True if args.continue_on_error else None,
    }
    if args.config:
        return BuildPipeline(load_config_from_file(args.config, **overrides))
    return BuildPipeline(PipelineConfig(**{k: v for k, v in overrides.items() if v is not None}))


def cmd_show_identity(args, pipeline: BuildPipeline) -> int:
    """Print the persisted identity"""
    record = pipeline.show_identity()
    if args.json:
        print(json.dumps(record.model_dump() if record else None, indent=2))
        return EXIT_OK

    if record is None:
        if pipeline.store.exists():
            print(f"{pipeline.store.path} has no package.name entry. Will generate on next build.")
        else:
            print("No package configuration found. Will generate on next build.")
        return EXIT_OK

    print(RULE)
    print("  Current Dynamic Package Name:")
    print(f"  → {record.identity}")
    print(f"  Generated at: {record.created_at}")
    print(RULE)
    return EXIT_OK


def cmd_apply_identity(args, pipeline: BuildPipeline) -> int:
    """Back up the manifest and write the identity into it"""
    result = pipeline.apply_identity()
    if args.json:
        print(json.dumps({
            "identity": result.identity,
            "outcome": result.provision.outcome.value,
            "backed_up": result.backed_up,
            "replacements": result.patch.replacements,
            "already_patched": result.patch.already_patched,
        }, indent=2))
        return EXIT_OK

    if result.backed_up:
        print("✓ Backed up manifest")
    verb = "Generated new random" if result.provision.generated else "Using existing"
    print(f"{verb} package: {result.identity}")
    if result.patch.changed:
        print(f"✓ Modified manifest with package: {result.identity} ({result.patch.replacements} replacement(s))")
    elif result.patch.already_patched:
        print("⚠️  Manifest already carries a generated package; run restore-manifest first")
    else:
        print("⚠️  Manifest left unchanged")
    return EXIT_OK


def cmd_restore_manifest(args, pipeline: BuildPipeline) -> int:
    """Restore the pristine manifest"""
    if pipeline.restore_manifest():
        print("✓ Restored manifest from backup")
    else:
        print("No manifest backup found, nothing to restore")
    return EXIT_OK


def cmd_regenerate_identity(args, pipeline: BuildPipeline) -> int:
    """Throw away the identity and generate a new one"""
    result = pipeline.regenerate_identity()
    if args.json:
        print(json.dumps(result.record.model_dump(), indent=2))
        return EXIT_OK

    print("")
    print(RULE)
    print("  New Random Package Generated!")
    print(f"  → {result.identity}")
    print("")
    print("  Next steps:")
    print("  1. Run: dynpkg restore-manifest")
    print("  2. Run: dynpkg apply-identity")
    print("  3. Build: dynpkg assemble -- ./gradlew assembleRelease")
    print(RULE)
    return EXIT_OK


def _report_assets(report) -> int:
    for path in report.downloaded:
        print(f"{path.name} downloaded to {path}")
    for failure in report.failed:
        print(f"❌ {failure}", file=sys.stderr)
    return EXIT_OK if report.ok else EXIT_FAILED


def cmd_download_assets(args, pipeline: BuildPipeline) -> int:
    """Fetch the external data files"""
    return _report_assets(pipeline.provision_assets())


def cmd_prepare(args, pipeline: BuildPipeline) -> int:
    """Everything assembly needs before packaging"""
    result = pipeline.prepare()
    print(f"✓ Package {result.apply.identity} applied")
    return _report_assets(result.assets)


def cmd_assemble(args, pipeline: BuildPipeline) -> int:
    """Prepare, then run the packaging command"""
    command = list(args.packaging_command)
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        print("❌ assemble needs a packaging command, e.g. dynpkg assemble -- ./gradlew assembleRelease",
              file=sys.stderr)
        return EXIT_FAILED

    result = pipeline.assemble(
        lambda: subprocess.run(command, cwd=pipeline.config.workspace, check=False)
    )
    assets_status = _report_assets(result.prepare.assets)
    if result.output.returncode != 0:
        print(f"❌ Packaging command exited with {result.output.returncode}", file=sys.stderr)
        return EXIT_FAILED
    if assets_status != EXIT_OK:
        print("❌ Packaging finished but some assets failed to download", file=sys.stderr)
        return EXIT_FAILED
    print("✅ Assemble complete")
    return EXIT_OK


def cmd_clean(args, pipeline: BuildPipeline) -> int:
    """Remove downloaded assets and restore the manifest"""
    result = pipeline.clean()
    for path in result.removed_assets:
        print(f"Removed {path}")
    if result.restored:
        print("✓ Restored manifest from backup")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="dynpkg - dynamic package identity and asset provisioning")
    parser.add_argument("--workspace", help=f"Build workspace root (default: {CONFIG['WORKSPACE']})")
    parser.add_argument("--manifest", help=f"Manifest path (default: {CONFIG['MANIFEST_PATH']})")
    parser.add_argument("--config", help="JSON pipeline configuration file")
    parser.add_argument("--continue-on-error", action="store_true", help="Keep downloading after a failed asset")
    parser.add_argument("--log-level", default=CONFIG["LOG_LEVEL"], help="Logging level")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, func, help_text in [
        ("show-identity", cmd_show_identity, "Display the current dynamic package name"),
        ("apply-identity", cmd_apply_identity, "Apply dynamic package name to the manifest"),
        ("restore-manifest", cmd_restore_manifest, "Restore original manifest from backup"),
        ("regenerate-identity", cmd_regenerate_identity, "Generate a new random package name"),
        ("download-assets", cmd_download_assets, "Download the geo data files"),
        ("prepare", cmd_prepare, "Apply identity and download assets"),
        ("clean", cmd_clean, "Delete downloaded assets and restore the manifest"),
    ]:
        sub = subparsers.add_parser(name, help=help_text)
        sub.set_defaults(func=func)

    assemble_parser = subparsers.add_parser("assemble", help="Prepare, then run a packaging command")
    assemble_parser.add_argument("packaging_command", nargs=argparse.REMAINDER, help="Command to run after preparation")
    assemble_parser.set_defaults(func=cmd_assemble)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_FAILED

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        pipeline = _build_pipeline(args)
        return args.func(args, pipeline)
    except StoreCorruptError as exc:
        print(f"❌ {exc}. Delete or fix the file and re-run.", file=sys.stderr)
        return EXIT_CORRUPT
    except ManifestMissingError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return EXIT_FAILED
    except AssetFetchError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return EXIT_FAILED
    except (DynPkgError, FileNotFoundError, ValueError) as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
