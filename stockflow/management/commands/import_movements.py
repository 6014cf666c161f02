"""
Management command to validate (and optionally commit) a movement upload.

Usage:
    python manage.py import_movements inbound.xlsx --kind inbound --category SU
    python manage.py import_movements dispatch.csv --kind outbound --channel Amazon --commit --user ops
"""

from django.core.management.base import BaseCommand, CommandError

from stockflow import movements
from stockflow.exceptions import StockflowError
from stockflow.models.enums import LineStatus, MovementKind


class Command(BaseCommand):
    """Import movements command."""

    help = 'Validates a movement spreadsheet and optionally commits it'

    def add_arguments(self, parser):
        parser.add_argument('path', help='Spreadsheet (.xlsx, .xls or .csv)')
        parser.add_argument(
            '--kind',
            required=True,
            choices=MovementKind.values,
            help='Movement kind',
        )
        parser.add_argument('--category', default='', help='Inbound category')
        parser.add_argument('--channel', default='', help='Outbound/return sales channel')
        parser.add_argument('--reason', default='', help='Default return reason')
        parser.add_argument('--user', default='', help='User recorded in the audit trail')
        parser.add_argument(
            '--commit',
            action='store_true',
            help='Apply valid and warning lines after validation',
        )

    def handle(self, *args, **options):
        try:
            lines = movements.read_batch(options['path'])
            report = movements.validate(
                lines,
                options['kind'],
                category=options['category'],
                channel=options['channel'],
                reason=options['reason'],
            )
        except FileNotFoundError as e:
            raise CommandError(f"File not found: {options['path']}") from e
        except StockflowError as e:
            for err in e.data.get('errors', []):
                self.stderr.write(f"  row {err['row']}: {err['field']}: {err['message']}")
            raise CommandError(f"{e.code}: {e.message}") from e

        for result in report.lines:
            self.stdout.write(self._format_line(result))

        counts = report.counts
        self.stdout.write(
            f"{counts['valid']} valid, {counts['warning']} warning(s), "
            f"{counts['error']} error(s)"
        )

        if not options['commit']:
            return

        if not options['user']:
            raise CommandError('--user is required with --commit')

        try:
            result = movements.commit(report, options['user'])
        except StockflowError as e:
            raise CommandError(f"{e.code}: {e.message}") from e

        for rejected in result.rejected:
            self.stdout.write(self.style.WARNING(
                f"row {rejected.row} rejected at commit: {rejected.message}"
            ))
        self.stdout.write(self.style.SUCCESS(
            f"{result.applied_count} line(s) applied to {len(result.stock)} SKU(s)"
        ))

    def _format_line(self, result) -> str:
        text = f"row {result.row:>4}  {result.sku:<20} {result.line.quantity:>6}  {str(result.status)}"
        if result.message:
            text = f"{text}  {result.message}"

        if result.status == LineStatus.VALID:
            return text
        if result.status == LineStatus.WARNING:
            return self.style.WARNING(text)
        if result.status == LineStatus.ERROR:
            return self.style.ERROR(text)
        raise AssertionError(f"Unhandled line status: {result.status}")
