from rest_framework import serializers

from .models import Quotation

BLOCK_TYPES = ['heading', 'paragraph', 'list', 'table']


class TableDataSerializer(serializers.Serializer):
    headers = serializers.ListField(child=serializers.CharField(allow_blank=True))
    rows = serializers.ListField(child=serializers.ListField(child=serializers.CharField(allow_blank=True)))
    style = serializers.DictField(required=False)

    def validate(self, data):
        width = len(data['headers'])
        for row in data['rows']:
            if len(row) != width:
                raise serializers.ValidationError("Every row must have one cell per header")
        return data


class ContentBlockSerializer(serializers.Serializer):
    id = serializers.CharField()
    type = serializers.ChoiceField(choices=BLOCK_TYPES)
    content = serializers.CharField(allow_blank=True, required=False, default='')
    style = serializers.DictField(required=False)
    items = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)
    table_data = TableDataSerializer(required=False)

    def validate(self, data):
        if data['type'] == 'table' and 'table_data' not in data:
            raise serializers.ValidationError({'table_data': "Table blocks need table_data"})
        return data


class QuotationSerializer(serializers.ModelSerializer):
    content_blocks = serializers.ListField(child=ContentBlockSerializer(), required=False)

    class Meta:
        model = Quotation
        fields = [
            'id', 'quotation_type', 'title', 'ref_no', 'date', 'company_details', 'client_details',
            'subject', 'greeting', 'content_blocks', 'footer', 'signature', 'watermark', 'styles',
            'answers', 'default_font_family', 'status', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'status', 'created_at', 'updated_at']

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Title cannot be blank")
        return value

    def validate_watermark(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Watermark must be an object")
        if value.get('type', 'none') not in ('text', 'image', 'none'):
            raise serializers.ValidationError("Watermark type must be text, image or none")
        opacity = value.get('opacity')
        if opacity is not None and not (isinstance(opacity, (int, float)) and 0 <= opacity <= 1):
            raise serializers.ValidationError("Watermark opacity must be between 0 and 1")
        return value


class QuotationListSerializer(serializers.ModelSerializer):
    client_name = serializers.SerializerMethodField()
    block_count = serializers.SerializerMethodField()

    class Meta:
        model = Quotation
        fields = ['id', 'quotation_type', 'title', 'ref_no', 'date', 'client_name', 'block_count',
                  'status', 'created_at', 'updated_at']

    def get_client_name(self, obj):
        return (obj.client_details or {}).get('name', '')

    def get_block_count(self, obj):
        return len(obj.content_blocks or [])
