from django.apps import AppConfig


class AuthConfig(AppConfig):
    name = 'apps.auth'
    verbose_name = 'Storefront sign-in'
    # Use a unique label to avoid clashing with django.contrib.auth
    label = 'storefront_auth'
