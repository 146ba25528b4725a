# apps/pagos/migrations/0001_initial.py

from decimal import Decimal
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('planes', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='SecuenciaRecibo',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('prefijo', models.CharField(max_length=10, unique=True)),
                ('ultimo_numero', models.PositiveIntegerField(default=0)),
            ],
            options={
                'verbose_name': 'Secuencia de Recibos',
                'verbose_name_plural': 'Secuencias de Recibos',
            },
        ),
        migrations.CreateModel(
            name='MatriculaPago',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(blank=True, db_index=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(blank=True, db_index=True, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('created_from_ip', models.GenericIPAddressField(blank=True, null=True, verbose_name='Created From IP')),
                ('updated_from_ip', models.GenericIPAddressField(blank=True, null=True, verbose_name='Updated From IP')),
                ('change_reason', models.CharField(blank=True, help_text='Explanation for why this change was made', max_length=255, null=True, verbose_name='Change Reason')),
                ('matricula_id', models.CharField(db_index=True, max_length=50, verbose_name='Matrícula')),
                ('numero_pago', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)], verbose_name='Número de Pago')),
                ('subtotal', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Subtotal')),
                ('total', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='Total')),
                ('fecha_vencimiento', models.DateField(blank=True, db_index=True, null=True, verbose_name='Fecha de Vencimiento')),
                ('estado', models.PositiveSmallIntegerField(choices=[(1, 'Pendiente'), (2, 'Pagado'), (3, 'Vencido'), (4, 'Anulado')], db_index=True, default=1, verbose_name='Estado')),
                ('fecha_anulacion', models.DateTimeField(blank=True, null=True, verbose_name='Fecha de Anulación')),
                ('motivo_anulacion', models.TextField(blank=True, null=True, verbose_name='Motivo de Anulación')),
                ('plan_pago', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='matriculas_pagos', to='planes.planpago', verbose_name='Plan de Pago')),
            ],
            options={
                'verbose_name': 'Pago de Matrícula',
                'verbose_name_plural': 'Pagos de Matrícula',
                'ordering': ['matricula_id', 'numero_pago'],
                'indexes': [
                    models.Index(fields=['estado', 'fecha_vencimiento'], name='pagos_matri_estado_9a4c12_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('matricula_id', 'numero_pago'), name='unique_numero_pago_por_matricula'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Abono',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(blank=True, db_index=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(blank=True, db_index=True, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('created_from_ip', models.GenericIPAddressField(blank=True, null=True, verbose_name='Created From IP')),
                ('updated_from_ip', models.GenericIPAddressField(blank=True, null=True, verbose_name='Updated From IP')),
                ('change_reason', models.CharField(blank=True, help_text='Explanation for why this change was made', max_length=255, null=True, verbose_name='Change Reason')),
                ('monto', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='Monto')),
                ('metodo_pago', models.CharField(choices=[('Efectivo', 'Efectivo'), ('Transferencia', 'Transferencia'), ('Tarjeta de Crédito', 'Tarjeta de Crédito'), ('Tarjeta de Débito', 'Tarjeta de Débito'), ('Cheque', 'Cheque'), ('Otro', 'Otro')], max_length=30, verbose_name='Método de Pago')),
                ('fecha_abono', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Fecha del Abono')),
                ('referencia', models.CharField(blank=True, max_length=100, null=True, verbose_name='Referencia')),
                ('nota', models.TextField(blank=True, null=True, verbose_name='Nota')),
                ('usuario_id', models.CharField(blank=True, db_index=True, max_length=50, null=True, verbose_name='Registrado por')),
                ('numero_recibo', models.CharField(blank=True, help_text='Generated on insert', max_length=30, null=True, unique=True, verbose_name='Número de Recibo')),
                ('matricula_pago', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='abonos', to='pagos.matriculapago', verbose_name='Pago de Matrícula')),
            ],
            options={
                'verbose_name': 'Abono',
                'verbose_name_plural': 'Abonos',
                'ordering': ['fecha_abono', 'created_at'],
                'indexes': [
                    models.Index(fields=['matricula_pago', 'fecha_abono'], name='pagos_abono_matricu_2d6e80_idx'),
                ],
            },
        ),
    ]
