# apps/planes/migrations/0001_initial.py

from decimal import Decimal
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PlanPago',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(blank=True, db_index=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(blank=True, db_index=True, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('created_from_ip', models.GenericIPAddressField(blank=True, null=True, verbose_name='Created From IP')),
                ('updated_from_ip', models.GenericIPAddressField(blank=True, null=True, verbose_name='Updated From IP')),
                ('change_reason', models.CharField(blank=True, help_text='Explanation for why this change was made', max_length=255, null=True, verbose_name='Change Reason')),
                ('nombre', models.CharField(max_length=150, verbose_name='Nombre')),
                ('descripcion', models.TextField(blank=True, null=True, verbose_name='Descripción')),
                ('tipo_pago', models.PositiveSmallIntegerField(choices=[(1, 'Pago único'), (2, 'Recurrente'), (3, 'Cuotas')], db_index=True, default=1, verbose_name='Tipo de Pago')),
                ('subtotal', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Subtotal')),
                ('total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Total')),
                ('periodicidad_valor', models.PositiveIntegerField(blank=True, null=True, verbose_name='Cada')),
                ('periodicidad_unidad', models.PositiveSmallIntegerField(blank=True, choices=[(1, 'Días'), (2, 'Semanas'), (3, 'Meses'), (4, 'Años')], null=True, verbose_name='Unidad de Periodicidad')),
                ('numero_cuotas', models.PositiveIntegerField(blank=True, null=True, verbose_name='Número de Cuotas')),
                ('subtotal_final', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True, verbose_name='Subtotal Final')),
                ('total_final', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True, verbose_name='Total Final')),
                ('activo', models.BooleanField(db_index=True, default=True, verbose_name='Activo')),
                ('impuesto', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='planes_pago', to='core.impuesto', verbose_name='Impuesto')),
                ('moneda', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='planes_pago', to='core.moneda', verbose_name='Moneda')),
            ],
            options={
                'verbose_name': 'Plan de Pago',
                'verbose_name_plural': 'Planes de Pago',
                'ordering': ['nombre'],
                'indexes': [
                    models.Index(fields=['tipo_pago', 'activo'], name='planes_plan_tipo_pa_5e0a7c_idx'),
                ],
            },
        ),
    ]
