# Generated manually

import bizhub.quotations.models
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
            name='Quotation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quotation_type', models.CharField(choices=[('manual', 'Manual'), ('automated', 'Automated'), ('ai-generated', 'AI Generated')], default='manual', max_length=20)),
                ('title', models.CharField(default='TECHNO COMMERCIAL QUOTATION', max_length=255)),
                ('ref_no', models.CharField(blank=True, max_length=100)),
                ('date', models.CharField(blank=True, max_length=100)),
                ('company_details', models.JSONField(blank=True, default=bizhub.quotations.models.default_company_details)),
                ('client_details', models.JSONField(blank=True, default=bizhub.quotations.models.default_client_details)),
                ('subject', models.TextField(blank=True)),
                ('greeting', models.CharField(blank=True, max_length=255)),
                ('content_blocks', models.JSONField(blank=True, default=list)),
                ('footer', models.JSONField(blank=True, default=bizhub.quotations.models.default_footer)),
                ('signature', models.JSONField(blank=True, default=bizhub.quotations.models.default_signature)),
                ('watermark', models.JSONField(blank=True, default=bizhub.quotations.models.default_watermark)),
                ('styles', models.JSONField(blank=True, default=dict, help_text='Rich-text styles keyed by field (title, ref_no, date, subject, greeting)')),
                ('answers', models.JSONField(blank=True, default=dict, help_text='Questionnaire answers the quotation was built from')),
                ('default_font_family', models.CharField(default='Times New Roman', max_length=100)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('finalized', 'Finalized')], default='draft', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='quotations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'quotations',
                'ordering': ['-updated_at'],
                'indexes': [models.Index(fields=['owner', '-updated_at'], name='idx_quotation_owner_updated')],
            },
        ),
    ]
