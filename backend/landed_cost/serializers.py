from __future__ import annotations

from rest_framework import serializers

from .dataclasses import MarginMode, RunConfig, VatBase
from .exceptions import InvalidMarginValue, InvalidModelConfig
from .models import PricingImport
from .services.margin import check_margin_value
from .services.utils import LATEST, to_date


class CostModelSerializer(serializers.Serializer):
    type = serializers.CharField()
    value = serializers.DecimalField(max_digits=20, decimal_places=10)


class RoundingSerializer(serializers.Serializer):
    mode = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    value = serializers.DecimalField(max_digits=10, decimal_places=4, required=False, allow_null=True)


class RunCreateSerializer(serializers.Serializer):
    import_id = serializers.IntegerField()
    name = serializers.CharField(required=False, allow_blank=True, default="")
    destination = serializers.CharField(max_length=8)
    incoterm = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=8)
    fx_date = serializers.CharField(required=False, default=LATEST)
    margin_mode = serializers.ChoiceField(choices=[m.value for m in MarginMode])
    margin_value = serializers.DecimalField(max_digits=10, decimal_places=6)
    freight_model = CostModelSerializer()
    insurance_model = CostModelSerializer()
    # country -> [{"name", "method", "value"}]; replaces the stored fee schedule for that country
    fees_overrides = serializers.DictField(
        child=serializers.ListField(child=serializers.DictField()), required=False, allow_null=True
    )
    vat_base = serializers.ChoiceField(
        choices=[b.value for b in VatBase], required=False, default=VatBase.CIF_PLUS_DUTY.value
    )
    threshold_toggles = serializers.DictField(child=serializers.BooleanField(), required=False)
    rounding = RoundingSerializer(required=False, allow_null=True)

    def validate_import_id(self, value: int):
        if not PricingImport.objects.filter(id=value).exists():
            raise serializers.ValidationError("Invalid import ID.")
        return value

    def validate_fx_date(self, value: str) -> str:
        value = (value or LATEST).strip()
        if value.lower() == LATEST:
            return LATEST
        try:
            return to_date(value).isoformat()
        except ValueError:
            raise serializers.ValidationError("fx_date must be an ISO date or 'latest'.")

    def validate(self, attrs):
        """Build the engine config now so unknown model tags fail at creation."""
        try:
            config = RunConfig.from_dict(attrs)
            check_margin_value(config.margin_mode, config.margin_value)
        except (InvalidModelConfig, InvalidMarginValue) as e:
            raise serializers.ValidationError({"config": str(e)})
        attrs["config"] = config
        return attrs


class RunRenameSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True, max_length=255)
