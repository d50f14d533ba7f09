# accounting/api/serializers/close_period.py

"""
======================================================
PATH: accounting/api/serializers/close_period.py
======================================================
CLOSE PERIOD SERIALIZER

Rules:
- start_date and end_date are required
- start_date must be <= end_date
"""

from rest_framework import serializers


class ClosePeriodSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError(
                {"end_date": "end_date must be >= start_date"}
            )
        return attrs
