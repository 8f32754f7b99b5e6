"""
Configuração do Django App LGPD.
"""

from django.apps import AppConfig


class LGPDConfig(AppConfig):
    """Configuração do app LGPD."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'portal_lgpd.adapters.django_app.lgpd'
    label = 'lgpd'
    verbose_name = 'LGPD - Direitos do Titular'
