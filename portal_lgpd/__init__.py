"""
Portal LGPD - direitos do titular de dados para o portal administrativo da igreja.

Camadas:
- core: domínio e casos de uso (sem framework)
- adapters: Django (ORM, views JSON, canais SMS/email, Celery)
- config: settings, container de DI e Celery
"""

__version__ = "1.0.0"
