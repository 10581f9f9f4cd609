from django.urls import path

from modules.core.views import ExpirySweepView

urlpatterns = [
    path("internal/matches/expire/", ExpirySweepView.as_view(), name="match_expiry_sweep"),
]
