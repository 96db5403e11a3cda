import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('complaints', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('CREATE_COMPLAINT', 'Create Complaint'), ('UPDATE_COMPLAINT', 'Update Complaint'), ('LOCK_COMPLAINT', 'Lock Complaint'), ('UNLOCK_COMPLAINT', 'Unlock Complaint'), ('RENEW_LOCK', 'Renew Lock'), ('ADD_COMMENT', 'Add Comment'), ('DELETE_COMPLAINT', 'Delete Complaint'), ('ASSIGN_EMPLOYEE', 'Assign Employee'), ('REMOVE_EMPLOYEE', 'Remove Employee'), ('CREATE_USER', 'Create User'), ('LOGIN', 'Login'), ('VERIFY', 'Verify'), ('CHANGE_PASSWORD', 'Change Password')], db_index=True, max_length=40, verbose_name='Action')),
                ('entity', models.CharField(max_length=50, verbose_name='Entity')),
                ('entity_id', models.CharField(max_length=64, verbose_name='Entity ID')),
                ('details', models.JSONField(blank=True, null=True, verbose_name='Details')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created At')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_entries', to=settings.AUTH_USER_MODEL, verbose_name='Performed By')),
            ],
            options={
                'verbose_name': 'Audit Log Entry',
                'verbose_name_plural': 'Audit Log',
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['entity', 'entity_id'], name='audit_entity_idx')],
            },
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated At')),
                ('type', models.CharField(choices=[('COMPLAINT_CREATED', 'Complaint Created'), ('NEW_COMPLAINT', 'New Complaint'), ('STATUS_UPDATE', 'Status Update'), ('NEW_COMMENT', 'New Comment'), ('ASSIGNMENT', 'Assignment'), ('REMOVAL', 'Removal'), ('ACCOUNT_CREATED', 'Account Created')], max_length=30, verbose_name='Type')),
                ('title', models.CharField(max_length=255, verbose_name='Title')),
                ('message', models.TextField(verbose_name='Message')),
                ('complaint', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='notifications', to='complaints.complaint', verbose_name='Complaint')),
                ('recipient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL, verbose_name='Recipient')),
            ],
            options={
                'verbose_name': 'Notification',
                'verbose_name_plural': 'Notifications',
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['recipient', 'created_at'], name='notif_recipient_created_idx')],
            },
        ),
    ]
