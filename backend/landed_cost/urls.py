from django.urls import path

from .views import (
    RunCalculateView,
    RunDetailView,
    RunDuplicateView,
    RunExportView,
    RunListCreateView,
)

urlpatterns = [
    path('runs', RunListCreateView.as_view(), name='landed-cost-runs'),
    path('runs/<int:run_id>', RunDetailView.as_view(), name='landed-cost-run-detail'),
    path('runs/<int:run_id>/calculate', RunCalculateView.as_view(), name='landed-cost-run-calculate'),
    path('runs/<int:run_id>/duplicate', RunDuplicateView.as_view(), name='landed-cost-run-duplicate'),
    path('runs/<int:run_id>/export', RunExportView.as_view(), name='landed-cost-run-export'),
]
