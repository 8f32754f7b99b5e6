"""
Configuração do Celery para processamento assíncrono.

O Celery é usado para:
- Processar Domain Events LGPD fora da transação
- Notificações ao titular (email)
- Limpeza periódica de tokens de verificação expirados

Uso:
    # Iniciar worker
    celery -A portal_lgpd.config worker -l INFO

    # Iniciar beat (tarefas agendadas)
    celery -A portal_lgpd.config beat -l INFO
"""

import os

from celery import Celery
from kombu import Exchange, Queue

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'portal_lgpd.config.settings')

app = Celery('portal_lgpd')

# Demais opções (broker, backend, serialização, retry) vêm de CELERY_* nos settings
app.config_from_object('django.conf:settings', namespace='CELERY')

# Definir filas
app.conf.task_queues = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('events', Exchange('events'), routing_key='events.#'),
    Queue('notifications', Exchange('notifications'), routing_key='notifications.#'),
)
app.conf.task_default_queue = 'default'

# Roteamento de tarefas para filas
app.conf.task_routes = {
    'portal_lgpd.adapters.django_app.events.handlers.notificar_titular': {'queue': 'notifications'},
    'portal_lgpd.adapters.django_app.events.handlers.limpar_tokens_expirados': {'queue': 'default'},
    'portal_lgpd.adapters.django_app.events.handlers.*': {'queue': 'events'},
}

app.autodiscover_tasks(['portal_lgpd.adapters.django_app.events'], related_name='handlers')

# Tarefas agendadas (beat)
app.conf.beat_schedule = {
    'limpar-tokens-expirados': {
        'task': 'portal_lgpd.adapters.django_app.events.handlers.limpar_tokens_expirados',
        'schedule': 86400.0,  # 1 dia
        'kwargs': {'days': int(os.environ.get('LGPD_TOKENS_RETENCAO_DIAS', 7))},
    },
}
