"""
Management command to audit pack counters and process history.

Scans ProductPack records and reports:
- Counter conservation failures
- History / counter mismatches
- Lineage and pending-record inconsistencies
"""

import json

from django.core.management.base import BaseCommand, CommandError

from django_packflow.audit import audit_packs
from django_packflow.models import ProductPack


class Command(BaseCommand):
    help = "Audit product packs for unit conservation and lineage consistency"

    def add_arguments(self, parser):
        parser.add_argument(
            "--format",
            choices=["text", "json"],
            default="text",
            help="Output format (default: text)",
        )
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Exit with an error if any violation is found",
        )

    def handle(self, *args, **options):
        output_format = options["format"]
        strict = options["strict"]

        packs = ProductPack.objects.all()
        scanned = packs.count()
        failures = audit_packs(packs)

        if output_format == "json":
            self.stdout.write(json.dumps({
                "scanned": scanned,
                "failed": len(failures),
                "violations": failures,
            }))
        else:
            self.stdout.write("\nPack Conservation Audit")
            self.stdout.write("=" * 30)
            self.stdout.write(f"Scanned: {scanned}")
            if failures:
                self.stdout.write(self.style.ERROR(f"FAILED: {len(failures)}"))
                for pack_id, errors in failures.items():
                    self.stdout.write(f"\n{pack_id}:")
                    for error in errors:
                        self.stdout.write(f"  - {error}")
            else:
                self.stdout.write(self.style.SUCCESS("FAILED: 0"))

        if strict and failures:
            raise CommandError(f"{len(failures)} pack(s) violate conservation invariants")
