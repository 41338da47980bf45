import re

from rest_framework import serializers

from .models import PromotionalBanner

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


class PromotionalBannerSerializer(serializers.ModelSerializer):
    class Meta:
        model = PromotionalBanner
        fields = [
            'id', 'title', 'description', 'icon', 'icon_color', 'background_color',
            'link_url', 'link_text', 'is_active', 'order', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def _color(self, value):
        if value in (None, ''):
            return None
        if not HEX_COLOR.match(value):
            raise serializers.ValidationError("Use a hex color such as #1A2B3C.")
        return value

    def validate_icon_color(self, value):
        return self._color(value)

    def validate_background_color(self, value):
        return self._color(value)


class BannerOrderEntrySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    order = serializers.IntegerField()


class BannerOrderSerializer(serializers.Serializer):
    banners = BannerOrderEntrySerializer(many=True, allow_empty=False)
