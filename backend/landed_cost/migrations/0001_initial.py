import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='FxRate',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('as_of_date', models.DateField(unique=True)),
                ('effective_to', models.DateField(blank=True, null=True)),
                ('base_ccy', models.CharField(default='PKR', max_length=3)),
                ('factors', models.JSONField(default=dict)),
                ('source', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'lc_fx_rates',
                'ordering': ('-as_of_date',),
                'managed': True,
            },
        ),
        migrations.CreateModel(
            name='DutyRate',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('country', models.CharField(max_length=8)),
                ('hs_code', models.CharField(max_length=16)),
                ('rate', models.DecimalField(decimal_places=6, max_digits=10)),
                ('effective_from', models.DateField()),
                ('effective_to', models.DateField(blank=True, null=True)),
            ],
            options={
                'db_table': 'lc_duty_rates',
                'managed': True,
                'indexes': [
                    models.Index(fields=['country', 'hs_code', 'effective_from'], name='lc_duty_ctry_hs_from_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='VatRate',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('country', models.CharField(max_length=8)),
                ('base', models.CharField(default='CIF_PLUS_DUTY', help_text='CIF, CIF_PLUS_DUTY or CIF_PLUS_DUTY_FEES', max_length=24)),
                ('rate', models.DecimalField(decimal_places=6, max_digits=10)),
                ('effective_from', models.DateField()),
                ('effective_to', models.DateField(blank=True, null=True)),
            ],
            options={
                'db_table': 'lc_vat_rates',
                'managed': True,
                'indexes': [
                    models.Index(fields=['country', 'base', 'effective_from'], name='lc_vat_ctry_base_from_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Fee',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('country', models.CharField(max_length=8)),
                ('name', models.TextField()),
                ('method', models.CharField(help_text='FIXED, PER_KG, PER_UNIT or PCT', max_length=16)),
                ('value', models.DecimalField(decimal_places=6, max_digits=14)),
            ],
            options={
                'db_table': 'lc_fees',
                'managed': True,
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('sku', models.CharField(max_length=64, unique=True)),
                ('name', models.TextField(blank=True, default='')),
                ('hs_code', models.CharField(max_length=16)),
                ('weight_kg', models.DecimalField(decimal_places=4, max_digits=12)),
                ('volume_m3', models.DecimalField(decimal_places=6, default=0, max_digits=12)),
            ],
            options={
                'db_table': 'lc_products',
                'managed': True,
            },
        ),
        migrations.CreateModel(
            name='PricingImport',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('name', models.TextField(blank=True, default='')),
                ('source_currency', models.CharField(default='PKR', max_length=3)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'lc_imports',
                'managed': True,
            },
        ),
        migrations.CreateModel(
            name='ImportItem',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('purchase_price', models.DecimalField(decimal_places=4, max_digits=14)),
                ('units', models.IntegerField(default=1)),
                ('pricing_import', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='landed_cost.pricingimport')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to='landed_cost.product')),
            ],
            options={
                'db_table': 'lc_import_items',
                'managed': True,
            },
        ),
        migrations.CreateModel(
            name='PricingRun',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('name', models.TextField(blank=True, default='')),
                ('destination', models.CharField(max_length=8)),
                ('incoterm', models.CharField(blank=True, default='', max_length=8)),
                ('fx_date', models.CharField(default='latest', max_length=16)),
                ('margin_mode', models.CharField(max_length=8)),
                ('margin_value', models.DecimalField(decimal_places=6, max_digits=10)),
                ('freight_model', models.JSONField()),
                ('insurance_model', models.JSONField()),
                ('fees_overrides', models.JSONField(blank=True, null=True)),
                ('vat_base', models.CharField(default='CIF_PLUS_DUTY', max_length=24)),
                ('threshold_toggles', models.JSONField(blank=True, default=dict)),
                ('rounding', models.JSONField(blank=True, null=True)),
                ('snapshot_rates', models.JSONField(blank=True, null=True)),
                ('totals', models.JSONField(blank=True, null=True)),
                ('reasons', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('pricing_import', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='runs', to='landed_cost.pricingimport')),
            ],
            options={
                'db_table': 'lc_pricing_runs',
                'managed': True,
            },
        ),
        migrations.CreateModel(
            name='PricingRunItem',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('purchase_price', models.DecimalField(decimal_places=4, max_digits=14)),
                ('landed_cost', models.DecimalField(decimal_places=6, max_digits=18)),
                ('selling_price', models.DecimalField(decimal_places=6, max_digits=18)),
                ('margin_pct', models.DecimalField(decimal_places=6, max_digits=12)),
                ('breakdown_json', models.JSONField()),
                ('import_item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to='landed_cost.importitem')),
                ('run', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='landed_cost.pricingrun')),
            ],
            options={
                'db_table': 'lc_pricing_run_items',
                'ordering': ('id',),
                'managed': True,
            },
        ),
    ]
