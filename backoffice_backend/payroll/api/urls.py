# payroll/api/urls.py

from django.urls import path

from payroll.api.views import PayrollRunListCreateView, PayrollRunReverseView

urlpatterns = [
    path("runs/", PayrollRunListCreateView.as_view(), name="payroll-runs"),
    path("runs/<int:run_id>/reverse/", PayrollRunReverseView.as_view(), name="payroll-run-reverse"),
]
