import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('departments', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DailyReferenceCounter',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('day', models.DateField(unique=True, verbose_name='Day')),
                ('last_value', models.PositiveIntegerField(default=0, verbose_name='Last Issued Value')),
            ],
            options={
                'verbose_name': 'Daily Reference Counter',
                'verbose_name_plural': 'Daily Reference Counters',
                'ordering': ['-day'],
            },
        ),
        migrations.CreateModel(
            name='Complaint',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated At')),
                ('reference_number', models.CharField(max_length=20, unique=True, verbose_name='Reference Number')),
                ('complaint_type', models.CharField(max_length=100, verbose_name='Complaint Type')),
                ('location', models.CharField(max_length=500, verbose_name='Location')),
                ('description', models.TextField(verbose_name='Description')),
                ('status', models.CharField(choices=[('NEW', 'New'), ('IN_PROGRESS', 'In Progress'), ('COMPLETED', 'Completed'), ('REJECTED', 'Rejected')], db_index=True, default='NEW', max_length=20, verbose_name='Status')),
                ('priority', models.PositiveSmallIntegerField(default=1, help_text='1 (lowest) to 5 (highest).', validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)], verbose_name='Priority')),
                ('is_locked', models.BooleanField(default=False, verbose_name='Locked')),
                ('locked_at', models.DateTimeField(blank=True, null=True, verbose_name='Locked At')),
                ('lock_expires_at', models.DateTimeField(blank=True, null=True, verbose_name='Lock Expires At')),
                ('resolved_at', models.DateTimeField(blank=True, null=True, verbose_name='Resolved At')),
                ('assigned_employee', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_complaints', to=settings.AUTH_USER_MODEL, verbose_name='Assigned Employee')),
                ('citizen', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='complaints', to=settings.AUTH_USER_MODEL, verbose_name='Citizen')),
                ('department', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='complaints', to='departments.department', verbose_name='Department')),
                ('locked_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='locked_complaints', to=settings.AUTH_USER_MODEL, verbose_name='Locked By')),
            ],
            options={
                'verbose_name': 'Complaint',
                'verbose_name_plural': 'Complaints',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['department', 'status'], name='complaint_dept_status_idx'),
                    models.Index(fields=['citizen', 'created_at'], name='complaint_citizen_created_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(('is_locked', True), ('locked_at__isnull', False), ('locked_by__isnull', False)),
                            models.Q(('is_locked', False), ('locked_at__isnull', True), ('locked_by__isnull', True)),
                            _connector='OR',
                        ),
                        name='complaint_lock_fields_consistent',
                    ),
                    models.CheckConstraint(
                        condition=models.Q(('priority__gte', 1), ('priority__lte', 5)),
                        name='complaint_priority_in_range',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='ComplaintComment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated At')),
                ('content', models.TextField(verbose_name='Content')),
                ('is_internal', models.BooleanField(default=False, verbose_name='Internal Note')),
                ('author', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='complaint_comments', to=settings.AUTH_USER_MODEL, verbose_name='Author')),
                ('complaint', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='comments', to='complaints.complaint', verbose_name='Complaint')),
            ],
            options={
                'verbose_name': 'Complaint Comment',
                'verbose_name_plural': 'Complaint Comments',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='ComplaintHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated At')),
                ('action', models.CharField(choices=[('CREATE', 'Created'), ('STATUS_CHANGE', 'Status Change'), ('ADD_COMMENT', 'Comment Added')], max_length=20, verbose_name='Action')),
                ('old_value', models.CharField(blank=True, max_length=20, null=True, verbose_name='Old Value')),
                ('new_value', models.CharField(blank=True, max_length=20, null=True, verbose_name='New Value')),
                ('description', models.TextField(blank=True, default='', verbose_name='Description')),
                ('complaint', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='history', to='complaints.complaint', verbose_name='Complaint')),
                ('performed_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='complaint_actions', to=settings.AUTH_USER_MODEL, verbose_name='Performed By')),
            ],
            options={
                'verbose_name': 'Complaint History Entry',
                'verbose_name_plural': 'Complaint History',
                'ordering': ['created_at', 'id'],
            },
        ),
    ]
