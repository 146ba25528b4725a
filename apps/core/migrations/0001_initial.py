# apps/core/migrations/0001_initial.py

from decimal import Decimal
import django.core.validators
from django.db import migrations, models
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Impuesto',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(blank=True, db_index=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(blank=True, db_index=True, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('created_from_ip', models.GenericIPAddressField(blank=True, null=True, verbose_name='Created From IP')),
                ('updated_from_ip', models.GenericIPAddressField(blank=True, null=True, verbose_name='Updated From IP')),
                ('change_reason', models.CharField(blank=True, help_text='Explanation for why this change was made', max_length=255, null=True, verbose_name='Change Reason')),
                ('nombre', models.CharField(max_length=100, verbose_name='Nombre')),
                ('codigo', models.CharField(max_length=20, unique=True, verbose_name='Código')),
                ('tasa', models.DecimalField(decimal_places=2, max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('100'))], verbose_name='Tasa (%)')),
                ('es_exento', models.BooleanField(default=False, verbose_name='Exento')),
                ('descripcion', models.TextField(blank=True, verbose_name='Descripción')),
                ('activo', models.BooleanField(db_index=True, default=True, verbose_name='Activo')),
            ],
            options={
                'verbose_name': 'Impuesto',
                'verbose_name_plural': 'Impuestos',
                'ordering': ['nombre'],
            },
        ),
        migrations.CreateModel(
            name='Moneda',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(blank=True, db_index=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(blank=True, db_index=True, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('created_from_ip', models.GenericIPAddressField(blank=True, null=True, verbose_name='Created From IP')),
                ('updated_from_ip', models.GenericIPAddressField(blank=True, null=True, verbose_name='Updated From IP')),
                ('change_reason', models.CharField(blank=True, help_text='Explanation for why this change was made', max_length=255, null=True, verbose_name='Change Reason')),
                ('codigo', models.CharField(max_length=3, unique=True, verbose_name='Código ISO')),
                ('nombre', models.CharField(max_length=100, verbose_name='Nombre')),
                ('simbolo', models.CharField(default='$', max_length=5, verbose_name='Símbolo')),
                ('activo', models.BooleanField(db_index=True, default=True, verbose_name='Activo')),
            ],
            options={
                'verbose_name': 'Moneda',
                'verbose_name_plural': 'Monedas',
                'ordering': ['codigo'],
            },
        ),
    ]
