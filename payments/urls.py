from django.urls import path

from . import views

app_name = "payments"
urlpatterns = [
    path("process/<str:order_id>", views.payfast_process_view, name="payfast_process"),
    path("notify", views.payfast_notify_view, name="payfast_notify"),
    path("status/<str:order_id>", views.payment_status_view, name="payment_status"),
]
