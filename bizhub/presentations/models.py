from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

LAYOUT_TYPES = ['title', 'comparison', 'features', 'imageRight', 'imageLeft', 'metrics', 'iconList', 'textOnly', 'closing']


class PresentationWorkspace(models.Model):
    """
    A slide deck in progress
    outline and presentation hold {title, slides: [...]} documents
    """
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('outline', 'Outline'),
        ('generated', 'Generated'),
        ('completed', 'Completed'),
    ]

    owner = models.ForeignKey('core.User', on_delete=models.CASCADE, related_name='presentation_workspaces')
    name = models.CharField(max_length=255)
    prompt = models.TextField(blank=True, default='')
    slide_count = models.PositiveSmallIntegerField(
        default=8, validators=[MinValueValidator(1), MaxValueValidator(50)]
    )
    theme = models.CharField(max_length=50, default='modern')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    outline = models.JSONField(null=True, blank=True)
    presentation = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'presentation_workspaces'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['owner', '-created_at'], name='idx_workspace_owner_created'),
            models.Index(fields=['owner', 'status'], name='idx_workspace_owner_status'),
        ]

    def __str__(self):
        return self.name

    @property
    def slides(self):
        return (self.presentation or {}).get('slides') or []
