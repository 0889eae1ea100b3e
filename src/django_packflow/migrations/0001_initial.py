"""Initial schema for django-packflow."""

import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Department',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(help_text="Department name, e.g. 'Bichuv' or 'Autsorspechat'", max_length=100, unique=True)),
                ('role', models.CharField(blank=True, choices=[('bichuv', 'Cutting'), ('tasnif', 'Sorting'), ('pechat', 'Printing'), ('pechat_usluga', 'Printing (outsourced)'), ('vishivka', 'Embroidery'), ('vishivka_usluga', 'Embroidery (outsourced)'), ('tikuv', 'Sewing'), ('tikuv_usluga', 'Sewing (outsourced)'), ('chistka', 'Cleaning'), ('kontrol', 'Quality control'), ('dazmol', 'Ironing'), ('upakovka', 'Packing'), ('ombor', 'Warehouse')], default='', help_text='Canonical role; blank = resolve from name', max_length=32)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Color',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=100, unique=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Size',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=100, unique=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='OutsourceCompany',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=200, unique=True)),
                ('phone', models.CharField(blank=True, default='', max_length=50)),
            ],
            options={
                'ordering': ['name'],
                'verbose_name_plural': 'outsource companies',
            },
        ),
        migrations.CreateModel(
            name='Employee',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=200)),
                ('department', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='employees', to='django_packflow.department')),
                ('user', models.OneToOneField(blank=True, help_text='Login account, if the employee has one', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='packflow_employee', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('model', models.CharField(help_text='Garment model name', max_length=200)),
                ('colors', models.ManyToManyField(blank=True, related_name='products', to='django_packflow.color')),
                ('sizes', models.ManyToManyField(blank=True, related_name='products', to='django_packflow.size')),
            ],
            options={
                'ordering': ['model'],
            },
        ),
        migrations.CreateModel(
            name='ProductPack',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('department_name', models.CharField(help_text='Department name at the time the pack was created', max_length=100)),
                ('total_count', models.PositiveBigIntegerField(help_text='Units in this pack; fixed at creation')),
                ('sent_count', models.PositiveBigIntegerField(default=0, help_text='Units forwarded to other departments')),
                ('invalid_count', models.PositiveBigIntegerField(default=0, help_text='Units rejected as invalid')),
                ('residue_count', models.PositiveBigIntegerField(default=0, help_text='Units on hand, neither forwarded nor rejected')),
                ('process_is_over', models.BooleanField(default=False)),
                ('department', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='packs', to='django_packflow.department')),
                ('parent', models.ForeignKey(blank=True, help_text='Lineage root (null = this pack is the root)', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='fragments', to='django_packflow.productpack')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='packs', to='django_packflow.product')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['department', 'process_is_over'], name='packflow_pack_dept_over_idx')],
                'constraints': [models.CheckConstraint(condition=models.Q(('total_count', models.F('sent_count') + models.F('invalid_count') + models.F('residue_count'))), name='packflow_pack_counts_conserved')],
            },
        ),
        migrations.CreateModel(
            name='ProductProcess',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('QabulQilingan', 'Accepted'), ('ToliqYuborilmagan', 'Partially sent'), ('Yuborilgan', 'Fully sent')], max_length=32)),
                ('accept_count', models.PositiveBigIntegerField(default=0)),
                ('sent_count', models.PositiveBigIntegerField(default=0)),
                ('invalid_count', models.PositiveBigIntegerField(default=0)),
                ('residue_count', models.PositiveBigIntegerField(default=0)),
                ('invalid_reason', models.TextField(blank=True, default='')),
                ('is_outsourced', models.BooleanField(default=False)),
                ('process_is_over', models.BooleanField(default=False)),
                ('department', models.ForeignKey(help_text='Department that owns this record', on_delete=django.db.models.deletion.PROTECT, related_name='processes', to='django_packflow.department')),
                ('employee', models.ForeignKey(help_text='Employee who performed the action', on_delete=django.db.models.deletion.PROTECT, related_name='processes', to='django_packflow.employee')),
                ('outsource_company', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='processes', to='django_packflow.outsourcecompany')),
                ('pack', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='processes', to='django_packflow.productpack')),
                ('receiver_department', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='django_packflow.department')),
                ('sender_department', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='django_packflow.department')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['pack', 'status'], name='packflow_proc_pack_status_idx'),
                    models.Index(fields=['department', 'status'], name='packflow_proc_dept_status_idx'),
                ],
                'constraints': [models.UniqueConstraint(condition=models.Q(('status', 'Pending')), fields=('pack',), name='packflow_one_pending_per_pack')],
            },
        ),
        migrations.AddField(
            model_name='productpack',
            name='current_process',
            field=models.ForeignKey(blank=True, help_text='Latest process record', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='django_packflow.productprocess'),
        ),
    ]
