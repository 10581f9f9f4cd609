from django.urls import path
from rest_framework.routers import SimpleRouter

from modules.transactions.views import EarningsView, TransactionViewSet

router = SimpleRouter()
router.register(r"transactions", TransactionViewSet, basename="transaction")

urlpatterns = [
    path("earnings/", EarningsView.as_view(), name="earnings"),
    *router.urls,
]
