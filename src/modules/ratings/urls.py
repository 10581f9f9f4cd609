from rest_framework.routers import SimpleRouter

from modules.ratings.views import RatingViewSet

router = SimpleRouter()
router.register(r"ratings", RatingViewSet, basename="rating")

urlpatterns = router.urls
