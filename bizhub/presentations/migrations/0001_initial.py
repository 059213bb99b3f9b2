# Generated manually

import django.core.validators
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
            name='PresentationWorkspace',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('prompt', models.TextField(blank=True, default='')),
                ('slide_count', models.PositiveSmallIntegerField(default=8, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(50)])),
                ('theme', models.CharField(default='modern', max_length=50)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('outline', 'Outline'), ('generated', 'Generated'), ('completed', 'Completed')], default='draft', max_length=20)),
                ('outline', models.JSONField(blank=True, null=True)),
                ('presentation', models.JSONField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='presentation_workspaces', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'presentation_workspaces',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['owner', '-created_at'], name='idx_workspace_owner_created'),
                    models.Index(fields=['owner', 'status'], name='idx_workspace_owner_status'),
                ],
            },
        ),
    ]
