from django.apps import AppConfig


class TransactionsConfig(AppConfig):
    name = "modules.transactions"
    label = "transactions"
