# apps/utils/migrations/0001_initial.py

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('contenttypes', '0002_remove_content_type_name'),
    ]

    operations = [
        migrations.CreateModel(
            name='FinancialAuditLog',
            fields=[
                ('id', models.AutoField(primary_key=True, serialize=False)),
                ('timestamp', models.DateTimeField(db_index=True)),
                ('action', models.CharField(choices=[('ABONO_APPLY', 'Abono Applied'), ('ABONO_REMOVE', 'Abono Removed'), ('INVOICE_CREATE', 'Invoice Created'), ('INVOICE_CANCEL', 'Invoice Cancelled'), ('INVOICE_OVERDUE', 'Invoice Marked Overdue'), ('PLAN_CREATE', 'Payment Plan Created'), ('PLAN_UPDATE', 'Payment Plan Updated'), ('PLAN_DELETE', 'Payment Plan Deleted')], db_index=True, max_length=30)),
                ('user_id', models.CharField(blank=True, db_index=True, max_length=100, null=True)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.TextField(blank=True, null=True)),
                ('object_id', models.CharField(blank=True, db_index=True, max_length=100, null=True)),
                ('object_description', models.CharField(blank=True, max_length=500, null=True)),
                ('amount_involved', models.DecimalField(blank=True, decimal_places=2, help_text='Monetary amount involved in the action', max_digits=15, null=True)),
                ('currency', models.CharField(blank=True, max_length=3, null=True)),
                ('old_values', models.JSONField(blank=True, help_text='Values before change', null=True)),
                ('new_values', models.JSONField(blank=True, help_text='Values after change', null=True)),
                ('risk_level', models.CharField(choices=[('LOW', 'Low Risk'), ('MEDIUM', 'Medium Risk'), ('HIGH', 'High Risk')], db_index=True, default='LOW', max_length=10)),
                ('notes', models.TextField(blank=True, null=True)),
                ('is_automated', models.BooleanField(default=False, help_text='Whether this action was performed automatically by the system')),
                ('content_type', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to='contenttypes.contenttype')),
            ],
            options={
                'verbose_name': 'Financial Audit Log',
                'verbose_name_plural': 'Financial Audit Logs',
                'ordering': ['-timestamp', '-id'],
                'indexes': [
                    models.Index(fields=['timestamp', 'action'], name='utils_finan_timesta_7c1f2e_idx'),
                    models.Index(fields=['content_type', 'object_id'], name='utils_finan_content_3b9d41_idx'),
                ],
            },
        ),
    ]
