"""
Configuração do Django App de Pessoas.
"""

from django.apps import AppConfig


class PessoasConfig(AppConfig):
    """Cadastro mínimo de membros, visitantes e registros dependentes."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'portal_lgpd.adapters.django_app.pessoas'
    label = 'pessoas'
    verbose_name = 'Cadastro de Pessoas'
