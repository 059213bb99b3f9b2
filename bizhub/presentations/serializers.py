from rest_framework import serializers

from .models import LAYOUT_TYPES, PresentationWorkspace


class ImageSizeSerializer(serializers.Serializer):
    width = serializers.IntegerField(min_value=10, max_value=100, required=False)
    height = serializers.IntegerField(min_value=10, max_value=100, required=False)
    object_fit = serializers.ChoiceField(choices=['cover', 'contain', 'fill', 'none'], default='cover')


class ComparisonColumnSerializer(serializers.Serializer):
    heading = serializers.CharField(required=False, allow_blank=True)
    points = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)


class ComparisonSerializer(serializers.Serializer):
    left = ComparisonColumnSerializer(required=False)
    right = ComparisonColumnSerializer(required=False)


class FeatureCardSerializer(serializers.Serializer):
    icon = serializers.CharField(required=False, allow_blank=True)
    title = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)


class MetricSerializer(serializers.Serializer):
    value = serializers.CharField(required=False, allow_blank=True)
    label = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)


class SlideSerializer(serializers.Serializer):
    title = serializers.CharField()
    layout_type = serializers.ChoiceField(choices=LAYOUT_TYPES, default='imageRight')
    # Bullet strings, or {icon, text} items for iconList slides
    content = serializers.ListField(child=serializers.JSONField(), required=False)
    subtitle = serializers.CharField(required=False, allow_blank=True)
    comparison = ComparisonSerializer(required=False)
    features = serializers.ListField(child=FeatureCardSerializer(), required=False)
    metrics = serializers.ListField(child=MetricSerializer(), required=False)
    has_image = serializers.BooleanField(default=True)
    image_keyword = serializers.CharField(required=False, allow_blank=True)
    image_url = serializers.CharField(required=False, allow_blank=True)
    image_public_id = serializers.CharField(required=False, allow_blank=True)
    image_source = serializers.ChoiceField(choices=['ai', 'upload'], default='ai')
    image_size = ImageSizeSerializer(required=False)


class PresentationDataSerializer(serializers.Serializer):
    title = serializers.CharField()
    slides = serializers.ListField(child=SlideSerializer(), required=False, default=list)


def validate_presentation_document(value):
    if value is None:
        return None
    serializer = PresentationDataSerializer(data=value)
    if not serializer.is_valid():
        raise serializers.ValidationError(serializer.errors)
    return serializer.validated_data


class PresentationWorkspaceSerializer(serializers.ModelSerializer):
    outline = serializers.JSONField(required=False, allow_null=True)
    presentation = serializers.JSONField(required=False, allow_null=True)
    slide_total = serializers.SerializerMethodField()

    class Meta:
        model = PresentationWorkspace
        fields = ['id', 'name', 'prompt', 'slide_count', 'theme', 'status', 'outline', 'presentation',
                  'slide_total', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_slide_total(self, obj):
        return len(obj.slides)

    def validate_outline(self, value):
        return validate_presentation_document(value)

    def validate_presentation(self, value):
        return validate_presentation_document(value)


class PresentationWorkspaceListSerializer(serializers.ModelSerializer):
    class Meta:
        model = PresentationWorkspace
        fields = ['id', 'name', 'prompt', 'slide_count', 'theme', 'status', 'created_at', 'updated_at']
