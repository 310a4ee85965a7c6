#!/usr/bin/env python3
"""
CLI script to upload a CSV export the same way the upload page does.

Hashes the file, checks the upload history for duplicates, parses and
validates the rows, prints a preview, then runs the upload pipeline
against the configured database.

Usage:
    python -m scripts.upload_csv_cli <filename> --source <tiktok|shopee|aipost|goaffpro>

Examples:
    python -m scripts.upload_csv_cli exports/orders.csv --source shopee --dry-run
    python -m scripts.upload_csv_cli exports/orders.csv --source tiktok --force
"""
import argparse
import sys
from pathlib import Path

from app.config import settings
from app.database import SessionLocal, create_tables, get_store
from app.services.content_validator import compute_content_hash, validate_dataset
from app.services.csv_parser import parse_csv
from app.services.duplicate_checker import find_duplicate
from app.services.errors import CsvParseError, UploadError
from app.services.upload_service import UploadOptions, UploadRequest, process_upload
from app.sources import DataSource

PREVIEW_ROWS = 5


def main():
    parser = argparse.ArgumentParser(
        description="Validate a CSV export and upload it to its data source table."
    )
    parser.add_argument("filename", help="Path to the CSV file to upload")
    parser.add_argument(
        "--source", "-s",
        required=True,
        choices=[source.value for source in DataSource],
        help="Data source the export comes from"
    )
    parser.add_argument(
        "--table", "-t",
        help="Target table (default: the data source's table)"
    )
    parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Upload even if the file was uploaded before"
    )
    parser.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="Validate and preview only, do not upload"
    )

    args = parser.parse_args()

    filepath = Path(args.filename)
    if not filepath.exists():
        print(f"Error: File not found: {filepath}", file=sys.stderr)
        sys.exit(1)

    if filepath.suffix.lower() != ".csv":
        print("Error: Please select a valid CSV file", file=sys.stderr)
        sys.exit(1)

    content = filepath.read_bytes()
    if len(content) > settings.MAX_FILE_SIZE:
        print(f"Error: File size too large. Maximum allowed size is {settings.MAX_FILE_SIZE // (1024 * 1024)}MB",
              file=sys.stderr)
        sys.exit(1)

    source = DataSource(args.source)
    table_name = args.table or source.table_name
    content_hash = compute_content_hash(content)

    create_tables()
    db = SessionLocal()
    try:
        duplicate = find_duplicate(db, content_hash, filepath.name, source.value, settings.DUPLICATE_HASH_SCOPE)
        if duplicate is not None:
            print(f"WARNING: This CSV has been uploaded before on {duplicate.upload_date} "
                  f"(matched by {duplicate.match_type}, upload #{duplicate.upload_id})")
            if not args.force:
                print("Use --force to upload anyway.")
                sys.exit(2)

        try:
            dataset = parse_csv(content, filepath.name, content_hash, header_transform=str.strip)
        except CsvParseError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            for detail in e.details:
                print(f"    {detail}", file=sys.stderr)
            sys.exit(1)

        problems = validate_dataset(dataset, settings.VALIDATION_SAMPLE_SIZE)
        if problems:
            print("VALIDATION FAILED - Bad symbols detected:", file=sys.stderr)
            for problem in problems:
                print(f"    {problem}", file=sys.stderr)
            sys.exit(1)

        print(f"{source.label} | File: {filepath.name} | {dataset.row_count} rows, {len(dataset.columns)} columns")
        print(f"Target table: {table_name}")
        print(f"Hash: {content_hash}")
        print("-" * 80)
        for i, record in enumerate(dataset.records[:PREVIEW_ROWS]):
            values = " | ".join(f"{key}={value[:20]}" for key, value in record.items())
            print(f"[{i + 1}] {values}")
        if dataset.row_count > PREVIEW_ROWS:
            print(f"... and {dataset.row_count - PREVIEW_ROWS} more rows")

        if args.dry_run:
            return

        request = UploadRequest(
            content=content,
            table_name=table_name,
            file_name=filepath.name,
            data_source=source.value,
            content_hash=content_hash,
        )
        try:
            outcome = process_upload(request, get_store(), db, UploadOptions.from_settings(settings))
        except UploadError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            for detail in e.details:
                print(f"    {detail}", file=sys.stderr)
            sys.exit(1)

        print("-" * 80)
        print(outcome.message)
        print(f"Inserted {outcome.inserted_rows} of {outcome.total_rows} rows into {outcome.table_name}")
        for error in outcome.errors:
            print(f"    {error}")
        if not outcome.success:
            sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
