#!/usr/bin/env python3
"""View Config Validator - check view config documents before deploying them.

Validates every view block against the model schema (or the block's own
columnsSchema for noModel blocks) and the available component templates.
Exits non-zero when any error is found (or any warning, with --strict).

Usage:
    # Validate every view config
    python scripts/validate_view_configs.py

    # Validate one model
    python scripts/validate_view_configs.py person

    # Treat warnings as failures, print JSON
    python scripts/validate_view_configs.py --strict --json
"""

import argparse
import json
import sys
from pathlib import Path

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from uiapi.components.registry import TemplateRegistry  # noqa: E402
from uiapi.errors import ModelSchemaNotFoundError  # noqa: E402
from uiapi.schema.registry import SchemaRegistry  # noqa: E402
from uiapi.settings import EngineSettings  # noqa: E402
from uiapi.views.registry import ViewConfigRegistry  # noqa: E402
from uiapi.views.schemas import ValidationReport  # noqa: E402
from uiapi.views.validator import ViewConfigValidator  # noqa: E402


def validate_models(
    models: list[str],
    views: ViewConfigRegistry,
    schemas: SchemaRegistry,
    validator: ViewConfigValidator,
) -> list[ValidationReport]:
    reports = []
    for model in models:
        document = views.get_document(model) or {}
        try:
            schema_columns = schemas.get_snapshot(model)
        except ModelSchemaNotFoundError:
            schema_columns = None
        reports.append(validator.validate(document, model, schema_columns))
    return reports


def print_report(report: ValidationReport) -> None:
    status = "OK" if report.ok else "FAILED"
    print(f"{report.model}: {status} ({len(report.errors)} errors, {len(report.warnings)} warnings)")
    for issue in report.errors:
        print(f"  ERROR   {issue.path} [{issue.rule}] {issue.message}")
    for issue in report.warnings:
        print(f"  WARNING {issue.path} [{issue.rule}] {issue.message}")


def main():
    parser = argparse.ArgumentParser(
        description="Validate view config documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "models",
        nargs="*",
        help="Model names to validate (default: every view config)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit non-zero on warnings as well as errors",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print reports as JSON",
    )

    args = parser.parse_args()

    settings = EngineSettings.from_env()
    views = ViewConfigRegistry(settings.view_configs_dir)
    schemas = SchemaRegistry(settings.schemas_dir)
    templates = TemplateRegistry(settings.templates_dir)
    validator = ViewConfigValidator(templates.list_kinds())

    models = args.models or views.list_models()
    reports = validate_models(models, views, schemas, validator)

    if args.json:
        print(json.dumps([r.model_dump() for r in reports], indent=2, ensure_ascii=False))
    else:
        for report in reports:
            print_report(report)

    failed = any(not r.ok for r in reports)
    if args.strict:
        failed = failed or any(r.warnings for r in reports)
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
