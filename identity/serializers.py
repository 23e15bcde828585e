from rest_framework import serializers


class IdentifyRequestSerializer(serializers.Serializer):
    # Values are stored as given; only the JSON types are checked here
    email = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    # CharField also accepts numbers, so {"phoneNumber": 123456} arrives as "123456"
    phoneNumber = serializers.CharField(
        source="phone_number",
        required=False,
        allow_null=True,
        allow_blank=True,
    )
