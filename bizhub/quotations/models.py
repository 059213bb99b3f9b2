from django.db import models


def default_company_details():
    return {'name': '', 'logo': '', 'gstin': '', 'phone': '', 'email': '', 'address': '',
            'header_value_color': '#1a1a1a', 'header_line_color': '#000000'}


def default_client_details():
    return {'name': '', 'designation': '', 'company': '', 'address': ''}


def default_footer():
    return {'line1': '', 'line2': '', 'line3': '', 'line_color': '#000000', 'text_color': '#000000'}


def default_signature():
    return {'name': '', 'designation': ''}


def default_watermark():
    return {'type': 'none', 'text': 'CONFIDENTIAL', 'color': '#cccccc', 'image': '',
            'opacity': 0.15, 'rotation': -30, 'width': 300, 'height': 200}


class Quotation(models.Model):
    """Techno-commercial quotation document built from ordered content blocks"""
    TYPE_CHOICES = [
        ('manual', 'Manual'),
        ('automated', 'Automated'),
        ('ai-generated', 'AI Generated'),
    ]

    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('finalized', 'Finalized'),
    ]

    owner = models.ForeignKey('core.User', on_delete=models.CASCADE, related_name='quotations')
    quotation_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='manual')
    title = models.CharField(max_length=255, default='TECHNO COMMERCIAL QUOTATION')
    ref_no = models.CharField(max_length=100, blank=True)
    date = models.CharField(max_length=100, blank=True)
    company_details = models.JSONField(default=default_company_details, blank=True)
    client_details = models.JSONField(default=default_client_details, blank=True)
    subject = models.TextField(blank=True)
    greeting = models.CharField(max_length=255, blank=True)
    content_blocks = models.JSONField(default=list, blank=True)
    footer = models.JSONField(default=default_footer, blank=True)
    signature = models.JSONField(default=default_signature, blank=True)
    watermark = models.JSONField(default=default_watermark, blank=True)
    styles = models.JSONField(default=dict, blank=True, help_text="Rich-text styles keyed by field (title, ref_no, date, subject, greeting)")
    answers = models.JSONField(default=dict, blank=True, help_text="Questionnaire answers the quotation was built from")
    default_font_family = models.CharField(max_length=100, default='Times New Roman')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'quotations'
        ordering = ['-updated_at']
        indexes = [
            models.Index(fields=['owner', '-updated_at'], name='idx_quotation_owner_updated'),
        ]

    def __str__(self):
        return f"{self.title} ({self.ref_no})" if self.ref_no else self.title
