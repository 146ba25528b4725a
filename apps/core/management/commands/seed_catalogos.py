# core/management/commands/seed_catalogos.py

from django.core.management.base import BaseCommand
from django.db import transaction
from core.models import Impuesto, Moneda
from decimal import Decimal
import pycountry


class Command(BaseCommand):
    help = 'Create the default tax and currency catalogs'

    def add_arguments(self, parser):
        parser.add_argument(
            '--moneda',
            default='USD',
            help='ISO 4217 code of the default currency (default: USD)'
        )
        parser.add_argument(
            '--simbolo',
            default='$',
            help='Symbol for the default currency'
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING('Setting up catalogs...'))

        with transaction.atomic():
            self.stdout.write('Creating Impuestos...')
            self.create_impuesto('IVA13', 'IVA 13%', Decimal('13.00'))
            self.create_impuesto('EXENTO', 'Exento', Decimal('0.00'), es_exento=True)

            self.stdout.write('Creating Monedas...')
            moneda = self.create_moneda(options['moneda'].upper(), options['simbolo'])

        self.stdout.write(self.style.SUCCESS('✅ Catalog setup complete!'))
        self.stdout.write(self.style.SUCCESS(f'   - {Impuesto.objects.count()} Impuestos'))
        self.stdout.write(self.style.SUCCESS(f'   - {Moneda.objects.count()} Monedas (default {moneda.codigo})'))

    def create_impuesto(self, codigo, nombre, tasa, es_exento=False):
        """Create or get tax"""
        obj, created = Impuesto.objects.get_or_create(
            codigo=codigo,
            defaults={
                'nombre': nombre,
                'tasa': tasa,
                'es_exento': es_exento,
                'activo': True,
            }
        )
        if created:
            self.stdout.write(f'  ✓ Created Impuesto: {codigo} - {nombre}')
        return obj

    def create_moneda(self, codigo, simbolo):
        """Create or get currency; the name comes from the ISO 4217 table"""
        currency = pycountry.currencies.get(alpha_3=codigo)
        obj, created = Moneda.objects.get_or_create(
            codigo=codigo,
            defaults={
                'nombre': currency.name if currency else codigo,
                'simbolo': simbolo,
                'activo': True,
            }
        )
        if created:
            self.stdout.write(f'  ✓ Created Moneda: {codigo} - {obj.nombre}')
        return obj
