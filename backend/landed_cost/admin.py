from django.contrib import admin

from .models import (
    DutyRate, Fee, FxRate, ImportItem, PricingImport, PricingRun, PricingRunItem, Product, VatRate,
)


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request): return False
    def has_change_permission(self, request, obj=None): return False
    def has_delete_permission(self, request, obj=None): return False


@admin.register(FxRate)
class FxRateAdmin(admin.ModelAdmin):
    list_display = ("id", "as_of_date", "effective_to", "base_ccy", "source")
    list_filter = ("base_ccy", "source")
    date_hierarchy = "as_of_date"


@admin.register(DutyRate)
class DutyRateAdmin(admin.ModelAdmin):
    list_display = ("id", "country", "hs_code", "rate", "effective_from", "effective_to")
    list_filter = ("country",)
    search_fields = ("hs_code",)


@admin.register(VatRate)
class VatRateAdmin(admin.ModelAdmin):
    list_display = ("id", "country", "base", "rate", "effective_from", "effective_to")
    list_filter = ("country", "base")


@admin.register(Fee)
class FeeAdmin(admin.ModelAdmin):
    list_display = ("id", "country", "name", "method", "value")
    list_filter = ("country", "method")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "sku", "name", "hs_code", "weight_kg", "volume_m3")
    search_fields = ("sku", "name", "hs_code")


class ImportItemInline(admin.TabularInline):
    model = ImportItem
    extra = 0
    autocomplete_fields = ("product",)


@admin.register(PricingImport)
class PricingImportAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "source_currency", "created_at")
    inlines = [ImportItemInline]


# Runs are written by the calculate endpoint only; the snapshot must not drift.
@admin.register(PricingRun)
class PricingRunAdmin(ReadOnlyAdmin):
    list_display = ("id", "name", "pricing_import", "destination", "margin_mode", "margin_value", "created_at")
    list_filter = ("destination", "margin_mode")


@admin.register(PricingRunItem)
class PricingRunItemAdmin(ReadOnlyAdmin):
    list_display = ("id", "run", "import_item", "landed_cost", "selling_price", "margin_pct")
    list_filter = ("run",)
