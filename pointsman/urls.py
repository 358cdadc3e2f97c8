from django.urls import path

from .views import BookingCompletedWebhookView, IssueRewardView, SummaryListView

app_name = "pointsman"

urlpatterns = [
    path("summaries/", SummaryListView.as_view(), name="summaries"),
    path("clients/<str:client_code>/rewards/", IssueRewardView.as_view(), name="issue-reward"),
    path("bookings/completed/", BookingCompletedWebhookView.as_view(), name="booking-completed"),
]
