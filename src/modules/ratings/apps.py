from django.apps import AppConfig


class RatingsConfig(AppConfig):
    name = "modules.ratings"
    label = "ratings"
