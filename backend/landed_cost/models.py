from django.db import models


class FxRate(models.Model):
    id = models.BigAutoField(primary_key=True)
    as_of_date = models.DateField(unique=True)
    effective_to = models.DateField(blank=True, null=True)
    base_ccy = models.CharField(max_length=3, default="PKR")
    # currency code -> units of that currency per one unit of base_ccy, as strings
    factors = models.JSONField(default=dict)
    source = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        managed = True
        db_table = 'lc_fx_rates'
        ordering = ('-as_of_date',)

    def __str__(self):
        return f"FX {self.base_ccy} @ {self.as_of_date}"


class DutyRate(models.Model):
    id = models.BigAutoField(primary_key=True)
    country = models.CharField(max_length=8)
    hs_code = models.CharField(max_length=16)
    rate = models.DecimalField(max_digits=10, decimal_places=6)
    effective_from = models.DateField()
    effective_to = models.DateField(blank=True, null=True)

    class Meta:
        managed = True
        db_table = 'lc_duty_rates'
        indexes = [models.Index(fields=['country', 'hs_code', 'effective_from'], name='lc_duty_ctry_hs_from_idx')]


class VatRate(models.Model):
    id = models.BigAutoField(primary_key=True)
    country = models.CharField(max_length=8)
    base = models.CharField(
        max_length=24,
        default="CIF_PLUS_DUTY",
        help_text="CIF, CIF_PLUS_DUTY or CIF_PLUS_DUTY_FEES",
    )
    rate = models.DecimalField(max_digits=10, decimal_places=6)
    effective_from = models.DateField()
    effective_to = models.DateField(blank=True, null=True)

    class Meta:
        managed = True
        db_table = 'lc_vat_rates'
        indexes = [models.Index(fields=['country', 'base', 'effective_from'], name='lc_vat_ctry_base_from_idx')]


class Fee(models.Model):
    id = models.BigAutoField(primary_key=True)
    country = models.CharField(max_length=8)
    name = models.TextField()
    method = models.CharField(max_length=16, help_text="FIXED, PER_KG, PER_UNIT or PCT")
    value = models.DecimalField(max_digits=14, decimal_places=6)

    class Meta:
        managed = True
        db_table = 'lc_fees'


class Product(models.Model):
    id = models.BigAutoField(primary_key=True)
    sku = models.CharField(max_length=64, unique=True)
    name = models.TextField(blank=True, default="")
    hs_code = models.CharField(max_length=16)
    weight_kg = models.DecimalField(max_digits=12, decimal_places=4)
    volume_m3 = models.DecimalField(max_digits=12, decimal_places=6, default=0)

    class Meta:
        managed = True
        db_table = 'lc_products'

    def __str__(self):
        return f"{self.sku} ({self.name})" if self.name else self.sku


class PricingImport(models.Model):
    id = models.BigAutoField(primary_key=True)
    name = models.TextField(blank=True, default="")
    source_currency = models.CharField(max_length=3, default="PKR")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        managed = True
        db_table = 'lc_imports'


class ImportItem(models.Model):
    id = models.BigAutoField(primary_key=True)
    pricing_import = models.ForeignKey(PricingImport, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT)
    purchase_price = models.DecimalField(max_digits=14, decimal_places=4)
    units = models.IntegerField(default=1)

    class Meta:
        managed = True
        db_table = 'lc_import_items'


class PricingRun(models.Model):
    id = models.BigAutoField(primary_key=True)
    pricing_import = models.ForeignKey(PricingImport, on_delete=models.PROTECT, related_name='runs')
    name = models.TextField(blank=True, default="")
    destination = models.CharField(max_length=8)
    incoterm = models.CharField(max_length=8, blank=True, default="")
    # ISO date or "latest"
    fx_date = models.CharField(max_length=16, default="latest")
    margin_mode = models.CharField(max_length=8)
    margin_value = models.DecimalField(max_digits=10, decimal_places=6)
    freight_model = models.JSONField()
    insurance_model = models.JSONField()
    fees_overrides = models.JSONField(blank=True, null=True)
    vat_base = models.CharField(max_length=24, default="CIF_PLUS_DUTY")
    threshold_toggles = models.JSONField(default=dict, blank=True)
    rounding = models.JSONField(blank=True, null=True)
    snapshot_rates = models.JSONField(blank=True, null=True)
    totals = models.JSONField(blank=True, null=True)
    reasons = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        managed = True
        db_table = 'lc_pricing_runs'


class PricingRunItem(models.Model):
    id = models.BigAutoField(primary_key=True)
    run = models.ForeignKey(PricingRun, on_delete=models.CASCADE, related_name='items')
    import_item = models.ForeignKey(ImportItem, on_delete=models.PROTECT)
    purchase_price = models.DecimalField(max_digits=14, decimal_places=4)
    landed_cost = models.DecimalField(max_digits=18, decimal_places=6)
    selling_price = models.DecimalField(max_digits=18, decimal_places=6)
    margin_pct = models.DecimalField(max_digits=12, decimal_places=6)
    breakdown_json = models.JSONField()

    class Meta:
        managed = True
        db_table = 'lc_pricing_run_items'
        ordering = ('id',)
