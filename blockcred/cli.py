"""
BlockCred CLI
==============

Command-line interface for hashing artifacts, computing certificate
ids, running a local issuance, inspecting the ledger and exporting
data contracts.

Usage:
    python -m blockcred hash transcript.pdf --metadata meta.json
    python -m blockcred cert-id --file-hash ab12... --student-id 2021CS001
    python -m blockcred issue --users users.json --file degree.pdf \\
        --student-id 2021CS001 --cert-type degree --issuer-id coe-1
    python -m blockcred ledger-status --cert-id 0x...
    python -m blockcred export-schemas --output-dir schemas
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path

from blockcred.config import get_config
from blockcred.errors import BlockCredError
from blockcred.utils import generate_run_id, load_json, save_json, setup_logging


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="blockcred",
        description="BlockCred: ledger-anchored academic credentials",
    )
    parser.add_argument("--config", type=str, default=None, help="Path to config YAML")
    parser.add_argument("--verbose", "-v", action="store_true")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # ── hash ────────────────────────────────────────────────────
    hash_parser = subparsers.add_parser("hash", help="Digest a file (and optional metadata)")
    hash_parser.add_argument("file", help="Artifact to hash")
    hash_parser.add_argument("--metadata", default=None, help="JSON file with metadata to digest")

    # ── cert-id ─────────────────────────────────────────────────
    certid_parser = subparsers.add_parser("cert-id", help="Compute a certificate id")
    certid_parser.add_argument("--file-hash", required=True)
    certid_parser.add_argument("--student-id", required=True)
    certid_parser.add_argument("--issued-at", default=None, help="ISO-8601 time (default: now, UTC)")

    # ── issue ───────────────────────────────────────────────────
    issue_parser = subparsers.add_parser("issue", help="Issue a certificate against a seeded store")
    issue_parser.add_argument("--users", required=True, help="JSON file with a list of users")
    issue_parser.add_argument("--file", required=True, help="Certificate artifact")
    issue_parser.add_argument("--student-id", required=True)
    issue_parser.add_argument("--issuer-id", required=True)
    issue_parser.add_argument(
        "--cert-type", required=True,
        choices=["marksheet", "degree", "bonafide", "noc", "participation"],
    )
    issue_parser.add_argument("--metadata", default=None, help="JSON file with CertificateMetadata")
    issue_parser.add_argument("--output", type=str, default=None, help="Output JSON path")

    # ── ledger-status ───────────────────────────────────────────
    status_parser = subparsers.add_parser("ledger-status", help="Show ledger connection status")
    status_parser.add_argument("--cert-id", default=None, help="Also show this certificate")

    # ── export-schemas ──────────────────────────────────────────
    schema_parser = subparsers.add_parser("export-schemas", help="Export JSON schemas")
    schema_parser.add_argument("--output-dir", default="schemas")

    args = parser.parse_args(argv)

    config = get_config(args.config)
    setup_logging(
        level="DEBUG" if args.verbose else config.log_level,
        format_style=config.log_format,
        run_id=generate_run_id(),
    )

    commands = {
        "hash": cmd_hash,
        "cert-id": cmd_cert_id,
        "issue": cmd_issue,
        "ledger-status": cmd_ledger_status,
        "export-schemas": cmd_export_schemas,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        sys.exit(1)

    try:
        command(args)
    except BlockCredError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_hash(args):
    """Print the file digest and, if given, the metadata digest."""
    from blockcred.hashing import file_digest, metadata_digest

    data = Path(args.file).read_bytes()
    print(f"file_hash:     {file_digest(data)}")
    if args.metadata:
        print(f"metadata_hash: {metadata_digest(load_json(args.metadata))}")


def cmd_cert_id(args):
    """Print the certificate id for the given inputs."""
    from blockcred.hashing import compute_cert_id
    from blockcred.utils import to_rfc3339, utc_now

    issued_at = datetime.fromisoformat(args.issued_at) if args.issued_at else utc_now()
    print(f"issued_at: {to_rfc3339(issued_at)}")
    print(f"cert_id:   {compute_cert_id(args.file_hash, args.student_id, issued_at)}")


def cmd_issue(args):
    """Issue one certificate, verify it, and print the public result."""
    from blockcred.pipeline import CredentialPipeline
    from blockcred.schemas import CertificateMetadata, CertType, IssueCertificateRequest, User
    from blockcred.store import MemoryStore

    users = [User.model_validate(u) for u in load_json(args.users)]
    metadata = (
        CertificateMetadata.model_validate(load_json(args.metadata))
        if args.metadata else CertificateMetadata()
    )
    file_path = Path(args.file)
    request = IssueCertificateRequest(
        student_id=args.student_id,
        cert_type=CertType(args.cert_type),
        file_data=file_path.read_bytes(),
        file_name=file_path.name,
        metadata=metadata,
    )

    with CredentialPipeline(get_config(args.config), store=MemoryStore(users)) as pipeline:
        cert = pipeline.issue(request, args.issuer_id)
        result = pipeline.verify(cert.cert_id)

    print(f"\nIssued:   {cert.cert_id}")
    print(f"Content:  {cert.content_url}")
    print(f"Ledger:   tx {cert.tx_hash} (block {cert.block_number})")
    print(f"Verified: {'✅' if result.is_valid else '❌'} {result.reason}")

    if args.output:
        save_json(result.to_public(), args.output)
        print(f"\nResult saved to {args.output}")


def cmd_ledger_status(args):
    """Show the configured ledger variant, chain height and optionally a record."""
    from blockcred.ledger import create_ledger_client

    config = get_config(args.config)
    ledger = create_ledger_client(config.ledger)
    try:
        print(f"Variant:  {config.ledger.variant.value}")
        print(f"RPC URL:  {config.ledger.rpc_url}")
        print(f"Contract: {config.ledger.contract_address or '(none, simulated)'}")
        print(f"Block:    {ledger.block_number()}")
        if args.cert_id:
            print(f"Valid:    {ledger.verify(args.cert_id)}")
            print(json.dumps(ledger.certificate_info(args.cert_id), indent=2, default=str))
    finally:
        ledger.close()


def cmd_export_schemas(args):
    """Export JSON schemas for all data contracts."""
    from blockcred.schemas import (
        Certificate,
        IssueCertificateRequest,
        OnChainRecord,
        User,
        VerificationResult,
    )

    output_dir = Path(args.output_dir)
    schemas = {
        "certificate": Certificate,
        "issue_request": IssueCertificateRequest,
        "on_chain_record": OnChainRecord,
        "user": User,
        "verification_result": VerificationResult,
    }
    for name, model in schemas.items():
        path = save_json(model.model_json_schema(), output_dir / f"{name}.json")
        print(f"Exported: {path}")

    print(f"\n{len(schemas)} schemas exported to {output_dir}/")


if __name__ == "__main__":
    main()
