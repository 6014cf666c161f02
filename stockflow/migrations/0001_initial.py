"""
Initial migration for Stockflow models.
"""

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Stockflow models: CatalogItem, StockRecord, Movement."""

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='CatalogItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sku', models.CharField(max_length=64, unique=True, verbose_name='SKU')),
                ('name', models.CharField(max_length=255, verbose_name='Name')),
                ('category', models.CharField(blank=True, default='', max_length=64, verbose_name='Category')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Catalog Item',
                'verbose_name_plural': 'Catalog Items',
                'ordering': ['sku'],
            },
        ),
        migrations.CreateModel(
            name='StockRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('_quantity', models.IntegerField(default=0, verbose_name='Quantity')),
                ('minimum', models.PositiveIntegerField(default=0, help_text='Outbound movements that leave less than this are flagged', verbose_name='Minimum')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('item', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='stock', to='stockflow.catalogitem', verbose_name='Item')),
            ],
            options={
                'verbose_name': 'Stock Record',
                'verbose_name_plural': 'Stock Records',
                'ordering': ['item__sku'],
            },
        ),
        migrations.CreateModel(
            name='Movement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('delta', models.IntegerField(help_text='Positive = in, Negative = out', verbose_name='Delta')),
                ('kind', models.CharField(choices=[('inbound', 'Inbound'), ('outbound', 'Outbound'), ('return', 'Return')], max_length=16, verbose_name='Kind')),
                ('report_id', models.CharField(db_index=True, max_length=32, verbose_name='Report')),
                ('row', models.PositiveIntegerField(verbose_name='Row')),
                ('username', models.CharField(max_length=150, verbose_name='User')),
                ('reason', models.CharField(blank=True, default='', max_length=255, verbose_name='Reason')),
                ('condition', models.CharField(blank=True, default='', max_length=64, verbose_name='Condition')),
                ('category', models.CharField(blank=True, default='', max_length=64, verbose_name='Category')),
                ('channel', models.CharField(blank=True, default='', max_length=64, verbose_name='Channel')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Timestamp')),
                ('stock', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='stockflow.stockrecord', verbose_name='Stock Record')),
            ],
            options={
                'verbose_name': 'Movement',
                'verbose_name_plural': 'Movements',
                'ordering': ['timestamp', 'report_id', 'row'],
            },
        ),
        # Constraints and indexes
        migrations.AddConstraint(
            model_name='stockrecord',
            constraint=models.CheckConstraint(condition=models.Q(_quantity__gte=0), name='stockflow_quantity_non_negative'),
        ),
        migrations.AddIndex(
            model_name='movement',
            index=models.Index(fields=['stock', 'timestamp'], name='stockflow_mov_stock_ts'),
        ),
        migrations.AddIndex(
            model_name='movement',
            index=models.Index(fields=['kind', 'timestamp'], name='stockflow_mov_kind_ts'),
        ),
    ]
