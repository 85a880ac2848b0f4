from rest_framework import serializers

from .constants import MAX_QUARTER_YEAR, MIN_QUARTER_YEAR, QUARTERS_PER_YEAR
from .models import MemberSavingsTarget, Quarter


class QuarterSerializer(serializers.ModelSerializer):
    quarter_number = serializers.IntegerField(
        min_value=1,
        max_value=QUARTERS_PER_YEAR,
    )
    year = serializers.IntegerField(
        min_value=MIN_QUARTER_YEAR,
        max_value=MAX_QUARTER_YEAR,
    )

    class Meta:
        model = Quarter
        fields = (
            "id",
            "name",
            "year",
            "quarter_number",
            "start_date",
            "end_date",
            "status",
            "shareout_activated",
            "shareout_date",
            "is_active",
            "is_shareout_period",
        )
        read_only_fields = (
            "name",
            "start_date",
            "end_date",
            "status",
            "shareout_activated",
            "shareout_date",
        )
        # Duplicates are reported by validate() with a friendlier message
        validators = []

    def validate(self, attrs):
        year = attrs.get("year")
        number = attrs.get("quarter_number")
        if Quarter.objects.filter(year=year, quarter_number=number).exists():
            raise serializers.ValidationError(f"Q{number} {year} already exists.")
        return attrs

    def create(self, validated_data):
        return Quarter.objects.create(status="inactive", **validated_data)


class MemberSavingsTargetSerializer(serializers.ModelSerializer):
    quarter = QuarterSerializer(read_only=True)
    quarterly_target = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        read_only=True,
    )

    class Meta:
        model = MemberSavingsTarget
        fields = (
            "id",
            "quarter",
            "monthly_target",
            "quarterly_target",
            "updated_at",
        )
        read_only_fields = fields
