from django.apps import AppConfig


class ShowcaseAppConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'showcase_app'
