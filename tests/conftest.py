"""
Configurações globais do Pytest para o Portal LGPD.

Configura o Django (sqlite em memória, cache e email locmem, bcrypt
rápido, publisher de eventos em memória) e fornece fixtures
compartilhadas.
"""

from pathlib import Path

import pytest


def pytest_configure(config):
    """Configura Django antes dos testes."""
    import django
    from django.conf import settings

    if not settings.configured:
        settings.configure(
            DEBUG=False,
            SECRET_KEY='test-secret-key',
            ALLOWED_HOSTS=['*'],
            DATABASES={
                'default': {
                    'ENGINE': 'django.db.backends.sqlite3',
                    'NAME': ':memory:',
                }
            },
            INSTALLED_APPS=[
                'django.contrib.admin',
                'django.contrib.auth',
                'django.contrib.contenttypes',
                'django.contrib.sessions',
                'django.contrib.messages',
                'portal_lgpd.adapters.django_app.pessoas',
                'portal_lgpd.adapters.django_app.lgpd',
            ],
            MIDDLEWARE=[
                'django.contrib.sessions.middleware.SessionMiddleware',
                'django.middleware.common.CommonMiddleware',
                'django.contrib.auth.middleware.AuthenticationMiddleware',
                'django.contrib.messages.middleware.MessageMiddleware',
            ],
            ROOT_URLCONF='portal_lgpd.config.urls',
            TEMPLATES=[{
                'BACKEND': 'django.template.backends.django.DjangoTemplates',
                'DIRS': [],
                'APP_DIRS': True,
                'OPTIONS': {
                    'context_processors': [
                        'django.template.context_processors.request',
                        'django.contrib.auth.context_processors.auth',
                        'django.contrib.messages.context_processors.messages',
                    ],
                },
            }],
            CACHES={
                'default': {
                    'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
                    'LOCATION': 'portal-lgpd-tests',
                }
            },
            EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend',
            DEFAULT_FROM_EMAIL='lgpd@igreja.test',
            DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
            USE_TZ=True,
            TIME_ZONE='America/Sao_Paulo',
            LGPD_NOME_PORTAL='Portal LGPD Teste',
            LGPD_BCRYPT_ROUNDS=4,
            LGPD_CANAL_TIMEOUT=5,
            LGPD_RATE_LIMIT_SOLICITAR_CODIGO=3,
            LGPD_RATE_LIMIT_VALIDAR_CODIGO=5,
            LGPD_RATE_LIMIT_JANELA_SEGUNDOS=3600,
            LGPD_PROXIES_CONFIAVEIS=0,
            TWILIO_ACCOUNT_SID=None,
            TWILIO_AUTH_TOKEN=None,
            TWILIO_PHONE_NUMBER=None,
            EVENT_PUBLISHER_MODE='memory',
            CELERY_TASK_ALWAYS_EAGER=True,
        )
        django.setup()


@pytest.fixture(scope="session")
def project_root():
    """Retorna o caminho raiz do projeto."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset de singletons entre testes.

    Container DI (repositórios, publisher em memória) e contadores de
    rate limiting começam limpos em cada teste.
    """
    from django.core.cache import cache
    from portal_lgpd.config.container import reset_container

    reset_container()
    cache.clear()
    yield
    reset_container()
    cache.clear()
