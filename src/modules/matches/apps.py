from django.apps import AppConfig


class MatchesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.matches"
    label = "matches"

    def ready(self) -> None:
        from modules.matches.handlers import HANDLED_EVENTS, match_audit_handler
        from shared.infrastructure.bus import event_bus

        for event_class in HANDLED_EVENTS:
            event_bus.subscribe(event_class, match_audit_handler)
