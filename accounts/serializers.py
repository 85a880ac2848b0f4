from django.contrib.auth import get_user_model

from rest_framework import serializers

User = get_user_model()


class UserProfileSerializer(serializers.ModelSerializer):
    full_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "phone_number",
            "role",
            "is_approved",
            "savings_category",
        )
        read_only_fields = fields

    def get_full_name(self, obj):
        return f"{obj.first_name} {obj.last_name}".strip() or obj.email


class MemberCategorySerializer(serializers.Serializer):
    savings_category = serializers.ChoiceField(
        choices=User.SAVINGS_CATEGORY_CHOICES,
        error_messages={
            "invalid_choice": "Savings category must be one of A, B or C.",
        },
    )
