from __future__ import annotations

import io
import logging
from typing import Dict

from django.db import transaction
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.utils.timezone import localdate

from rest_framework import status, views
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .exceptions import EmptyItemSet, InvalidMarginValue, InvalidModelConfig, RateNotFound
from .models import PricingRun, PricingRunItem
from .serializers import RunCreateSerializer, RunRenameSerializer
from .services.export import breakdown_rows, write_csv
from .services.rate_resolver import RateResolver
from .services.run_service import compute_run
from .store import DjangoRateStore, load_import_items, run_config

logger = logging.getLogger(__name__)


class StandardResultsSetPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 500


def engine_error_response(e: Exception) -> Response:
    """Translate a fatal engine error into the DRF 'detail' error shape."""
    if isinstance(e, RateNotFound):
        return Response({"detail": str(e)}, status=status.HTTP_422_UNPROCESSABLE_ENTITY)
    return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)


def serialize_run(run: PricingRun) -> Dict:
    return {
        "id": run.id,
        "import_id": run.pricing_import_id,
        "name": run.name,
        "destination": run.destination,
        "incoterm": run.incoterm,
        "fx_date": run.fx_date,
        "margin_mode": run.margin_mode,
        "margin_value": str(run.margin_value),
        "freight_model": run.freight_model,
        "insurance_model": run.insurance_model,
        "fees_overrides": run.fees_overrides,
        "vat_base": run.vat_base,
        "threshold_toggles": run.threshold_toggles,
        "rounding": run.rounding,
        "is_calculated": run.snapshot_rates is not None,
        "created_at": run.created_at.isoformat(),
        "updated_at": run.updated_at.isoformat(),
    }


def serialize_item(item: PricingRunItem) -> Dict:
    # figures come from the stored breakdown so they match the export exactly
    calc = item.breakdown_json["calculations"]
    return {
        "id": item.id,
        "import_item_id": item.import_item_id,
        "sku": item.breakdown_json["inputs"]["sku"],
        "purchase_price": item.breakdown_json["inputs"]["purchase_price"],
        "landed_cost": calc["landed_cost"],
        "selling_price": calc["selling_price"],
        "margin_pct": calc["margin_pct"],
        "breakdown": item.breakdown_json,
    }


def run_payload(run: PricingRun, request, view) -> Dict:
    paginator = StandardResultsSetPagination()
    page = paginator.paginate_queryset(run.items.all(), request, view=view)
    return {
        "run": serialize_run(run),
        "items": {
            "count": paginator.page.paginator.count,
            "next": paginator.get_next_link(),
            "previous": paginator.get_previous_link(),
            "results": [serialize_item(i) for i in page],
        },
        "totals": run.totals,
        "snapshot_rates": run.snapshot_rates,
        "is_incomplete": bool(run.reasons),
        "reasons": run.reasons or [],
    }


class RunListCreateView(views.APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = PricingRun.objects.order_by("-created_at", "-id")
        import_id = request.query_params.get("import_id")
        if import_id:
            try:
                qs = qs.filter(pricing_import_id=int(import_id))
            except ValueError:
                return Response({"detail": "import_id must be an integer"}, status=status.HTTP_400_BAD_REQUEST)
        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        items = []
        for run in page:
            items.append({**serialize_run(run), "totals": run.totals})
        return paginator.get_paginated_response(items)

    def post(self, request):
        ser = RunCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        cfg = data["config"].to_dict()

        run = PricingRun.objects.create(
            pricing_import_id=data["import_id"],
            name=data.get("name") or "",
            destination=cfg["destination"],
            incoterm=cfg["incoterm"],
            fx_date=cfg["fx_date"],
            margin_mode=cfg["margin_mode"],
            margin_value=data["config"].margin_value,
            freight_model=cfg["freight_model"],
            insurance_model=cfg["insurance_model"],
            fees_overrides=cfg["fees_overrides"],
            vat_base=cfg["vat_base"],
            threshold_toggles=cfg["threshold_toggles"],
            rounding=cfg["rounding"],
        )
        logger.info("Created pricing run %s for import %s (%s)", run.id, run.pricing_import_id, run.destination)
        return Response(serialize_run(run), status=status.HTTP_201_CREATED)


class RunDetailView(views.APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, run_id: int):
        run = get_object_or_404(PricingRun, pk=run_id)
        return Response(run_payload(run, request, self), status=status.HTTP_200_OK)

    def patch(self, request, run_id: int):
        run = get_object_or_404(PricingRun, pk=run_id)
        ser = RunRenameSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        run.name = ser.validated_data["name"]
        run.save(update_fields=["name", "updated_at"])
        return Response(serialize_run(run), status=status.HTTP_200_OK)


class RunCalculateView(views.APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, run_id: int):
        run = get_object_or_404(PricingRun, pk=run_id)
        try:
            config = run_config(run)
            items = load_import_items(run.pricing_import_id)
            output = compute_run(items, config, RateResolver(DjangoRateStore()), as_of=localdate())
        except (EmptyItemSet, InvalidMarginValue, InvalidModelConfig, RateNotFound) as e:
            logger.warning("Pricing run %s failed: %s", run.id, e)
            return engine_error_response(e)
        except Exception:
            logger.exception("Unexpected error calculating pricing run %s", run.id)
            raise

        with transaction.atomic():
            # a recalculation replaces the previous results and snapshot
            run.items.all().delete()
            PricingRunItem.objects.bulk_create([
                PricingRunItem(
                    run=run,
                    import_item_id=r.import_item_id,
                    purchase_price=r.purchase_price,
                    landed_cost=r.landed_cost,
                    selling_price=r.selling_price,
                    margin_pct=r.margin_pct,
                    breakdown_json=r.breakdown.to_dict(),
                )
                for r in output.results
            ])
            run.snapshot_rates = output.snapshot.to_dict()
            run.totals = output.totals.to_dict()
            run.reasons = list(output.reasons)
            run.save(update_fields=["snapshot_rates", "totals", "reasons", "updated_at"])

        return Response(run_payload(run, request, self), status=status.HTTP_200_OK)


class RunDuplicateView(views.APIView):
    permission_classes = [IsAuthenticated]

    @transaction.atomic
    def post(self, request, run_id: int):
        src = get_object_or_404(PricingRun, pk=run_id)
        copy = PricingRun.objects.create(
            pricing_import_id=src.pricing_import_id,
            name=f"{src.name} (copy)" if src.name else "",
            destination=src.destination,
            incoterm=src.incoterm,
            fx_date=src.fx_date,
            margin_mode=src.margin_mode,
            margin_value=src.margin_value,
            freight_model=src.freight_model,
            insurance_model=src.insurance_model,
            fees_overrides=src.fees_overrides,
            vat_base=src.vat_base,
            threshold_toggles=src.threshold_toggles,
            rounding=src.rounding,
            snapshot_rates=src.snapshot_rates,
            totals=src.totals,
            reasons=src.reasons,
        )
        PricingRunItem.objects.bulk_create([
            PricingRunItem(
                run=copy,
                import_item_id=i.import_item_id,
                purchase_price=i.purchase_price,
                landed_cost=i.landed_cost,
                selling_price=i.selling_price,
                margin_pct=i.margin_pct,
                breakdown_json=i.breakdown_json,
            )
            for i in src.items.all()
        ])
        logger.info("Duplicated pricing run %s as %s", src.id, copy.id)
        return Response(serialize_run(copy), status=status.HTTP_201_CREATED)


class RunExportView(views.APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, run_id: int):
        run = get_object_or_404(PricingRun, pk=run_id)
        if run.snapshot_rates is None:
            return Response({"detail": "Run has not been calculated"}, status=status.HTTP_409_CONFLICT)
        items = run.items.select_related("import_item__product")
        rows = breakdown_rows(
            {"breakdown": i.breakdown_json, "product_name": i.import_item.product.name} for i in items
        )
        buf = io.StringIO()
        write_csv(rows, buf)
        resp = HttpResponse(buf.getvalue(), content_type="text/csv")
        resp["Content-Disposition"] = f'attachment; filename="pricing-run-{run.id}.csv"'
        return resp
