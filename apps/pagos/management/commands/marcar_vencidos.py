# pagos/management/commands/marcar_vencidos.py

from django.core.management.base import BaseCommand, CommandError
from pagos.services import InvoiceService
from pagos.utils import parse_date
from utils.context import audit_context


class Command(BaseCommand):
    help = 'Mark PENDIENTE invoices past their due date as VENCIDO'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fecha',
            help='Reference date YYYY-MM-DD (default: today)'
        )

    def handle(self, *args, **options):
        as_of = None
        if options.get('fecha'):
            as_of = parse_date(options['fecha'])
            if as_of is None:
                raise CommandError(f"Invalid date: {options['fecha']} (expected YYYY-MM-DD)")

        self.stdout.write(self.style.WARNING('Marking overdue invoices...'))
        with audit_context(source='marcar_vencidos'):
            count = InvoiceService.mark_overdue(as_of)
        self.stdout.write(self.style.SUCCESS(f'✅ {count} invoice(s) marked as VENCIDO'))
